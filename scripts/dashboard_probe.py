#!/usr/bin/env python3
"""Run a dashboard session from the terminal and print its snapshots.

Live mode subscribes to the ``solar/*`` channels on the configured
broker; replay mode plays the recorded energy dataset.  Settings come
from ``SOLAR_*`` environment variables, overridden by the flags below.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from solardash import (  # noqa: E402
    ConnectionStatus,
    DashboardConfig,
    DashboardSession,
    SolarDashError,
    SystemState,
    TransportError,
)
from solardash.gateway import ReplaySubscription  # noqa: E402


@dataclass
class ProbeStats:
    started_at: float
    snapshots: int = 0
    degraded: int = 0
    last_snapshot_at: float | None = None


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print rolling dashboard state from a live broker or a replay dataset.",
    )
    parser.add_argument("--mode", choices=("live", "replay"), help="Override SOLAR_MODE.")
    parser.add_argument("--broker", help="Broker URL, e.g. ws://raspberrypi.local:9001.")
    parser.add_argument("--dataset", help="Local replay dataset (JSON array of {energy}).")
    parser.add_argument("--replay-url", help="Replay dataset URL.")
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between replayed records.",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C or replay end).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full snapshot payload instead of a one-line summary.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _config_from_args(args: argparse.Namespace) -> DashboardConfig:
    overrides: dict[str, Any] = {}
    if args.mode:
        overrides["mode"] = args.mode
    if args.broker:
        overrides["broker_url"] = args.broker
    if args.dataset:
        overrides["replay_path"] = args.dataset
    if args.replay_url:
        overrides["replay_url"] = args.replay_url
    if args.interval is not None:
        overrides["replay_interval"] = args.interval
    return DashboardConfig.from_env(**overrides)


def _summary_line(state: SystemState) -> str:
    return (
        f"voltage={state.voltage} smoke={state.smoke} energy={state.energy} impact={state.impact} "
        f"microgrid={state.microgrid!r} emergency={state.emergency!r} maintenance={state.maintenance!r} "
        f"window={len(state.energy_history)}"
    )


async def _run(args: argparse.Namespace, config: DashboardConfig) -> ProbeStats:
    stats = ProbeStats(started_at=time.time())
    stop = asyncio.Event()

    def on_snapshot(state: SystemState) -> None:
        stats.snapshots += 1
        stats.last_snapshot_at = time.time()
        if args.json:
            print(json.dumps(state.to_payload(), indent=2, ensure_ascii=False))
        else:
            print(f"[probe] #{stats.snapshots} {_summary_line(state)}")

    def on_status(status: ConnectionStatus, error: TransportError | None) -> None:
        if status is ConnectionStatus.DEGRADED:
            stats.degraded += 1
        print(f"[probe] connection {status}" + (f": {error}" if error else ""))

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    session = await DashboardSession.open(config, on_snapshot=on_snapshot, on_status=on_status)
    async with session:
        waiters = [asyncio.create_task(stop.wait())]
        subscription = session.subscription
        if isinstance(subscription, ReplaySubscription):
            waiters.append(asyncio.create_task(subscription.wait_exhausted()))
        timeout = args.duration if args.duration > 0 else None
        _done, pending = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()

        insights = session.insights()
        if insights is not None:
            print(
                f"[probe] insights avg={insights.average:.1f} grid={insights.grid_load} "
                f"performance={insights.performance!r} surge={insights.surge!r}"
            )
    return stats


def _print_summary(stats: ProbeStats) -> None:
    runtime = time.time() - stats.started_at
    print("[probe] Summary")
    print(f"[probe]   runtime_s : {runtime:.1f}")
    print(f"[probe]   snapshots : {stats.snapshots}")
    print(f"[probe]   degraded  : {stats.degraded}")


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _config_from_args(args)
        stats = asyncio.run(_run(args, config))
    except SolarDashError as exc:
        print(f"[probe] Startup failed: {exc}", file=sys.stderr)
        return 2

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
