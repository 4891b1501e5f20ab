#!/usr/bin/env python3
"""Publish synthetic solar sensor readings to an MQTT broker.

Stand-in for the Raspberry Pi publisher: every ``--period`` seconds it
sends voltage, smoke, energy, impact and an emergency status on the
``solar/*`` channels.
"""

from __future__ import annotations

import argparse
import logging
import random
import signal
import sys
import time
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import paho.mqtt.client as mqtt  # noqa: E402

from solardash import DashboardConfig, SolarDashError  # noqa: E402
from solardash.simulator import readings_to_messages, simulate_readings  # noqa: E402

_LOG = logging.getLogger("sensor_simulator")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Publish simulated solar sensor readings.")
    parser.add_argument("--broker", help="Broker URL (defaults to SOLAR_BROKER_URL).")
    parser.add_argument("--period", type=float, default=2.0, help="Seconds between reading cycles.")
    parser.add_argument("--count", type=int, default=0, help="Number of cycles (0 = until Ctrl+C).")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs.")
    parser.add_argument("--client-id", default="SolarPiPublisher", help="MQTT client id.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    return parser.parse_args()


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = DashboardConfig.from_env(**({"broker_url": args.broker} if args.broker else {}))
        broker = config.broker
    except SolarDashError as exc:
        print(f"[simulator] Invalid configuration: {exc}", file=sys.stderr)
        return 2

    should_stop = False

    def stop_handler(_signum: int, _frame: Any) -> None:
        nonlocal should_stop
        should_stop = True

    signal.signal(signal.SIGINT, stop_handler)
    signal.signal(signal.SIGTERM, stop_handler)

    client = mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=args.client_id,
        transport=broker.transport,
        protocol=mqtt.MQTTv311,
    )
    client.enable_logger(_LOG)
    if broker.transport == "websockets":
        client.ws_set_options(path=broker.path)
    if broker.tls:
        client.tls_set()

    rng = random.Random(args.seed)
    cycles = 0
    print(f"[simulator] Connecting to {broker.display}...")
    try:
        client.connect(broker.host, broker.port, keepalive=config.mqtt_keepalive)
        client.loop_start()

        while not should_stop and (args.count <= 0 or cycles < args.count):
            readings = simulate_readings(rng)
            for topic, payload in readings_to_messages(readings, prefix=config.topic_prefix):
                client.publish(topic, payload)
            cycles += 1
            print(
                f"[simulator] #{cycles} voltage={readings.voltage:.1f} smoke={readings.smoke:.1f} "
                f"energy={readings.energy:.1f} impact={readings.impact:.1f}"
            )
            time.sleep(args.period)
    except OSError as exc:
        print(f"[simulator] Connection failed: {exc}", file=sys.stderr)
        return 1
    finally:
        try:
            client.disconnect()
        finally:
            client.loop_stop()

    print(f"[simulator] Published {cycles} cycles")
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
