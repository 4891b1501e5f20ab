from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from solardash.exceptions import TransportError
from solardash.gateway.base import ConnectionStatus
from solardash.gateway.replay import ReplayGateway, ReplaySubscription
from solardash.models.replay import ReplayRecord
from solardash.models.update import SensorField, SensorUpdate, UpdateSource

_STAMP = datetime(2026, 1, 1, tzinfo=UTC)


def _records(*values: float) -> list[ReplayRecord]:
    return [ReplayRecord(energy=v) for v in values]


@pytest.mark.asyncio
async def test_replay_emits_energy_then_derived_impact_per_record() -> None:
    received: list[SensorUpdate] = []
    gateway = ReplayGateway(_records(10.0, 90.0, 50.0), interval=0, clock=lambda: _STAMP)

    subscription = gateway.subscribe(received.append)
    await asyncio.wait_for(subscription.wait_exhausted(), timeout=1.0)

    assert [u.field for u in received] == [SensorField.ENERGY, SensorField.IMPACT] * 3
    assert [u.value for u in received[::2]] == [10.0, 90.0, 50.0]
    assert [u.value for u in received[1::2]] == pytest.approx([1.0, 9.0, 5.0])
    assert all(u.source == UpdateSource.REPLAY for u in received)
    assert all(u.received_at == _STAMP for u in received)
    assert subscription.position == 3
    subscription.unsubscribe()


@pytest.mark.asyncio
async def test_exhausted_replay_goes_quiet() -> None:
    received: list[SensorUpdate] = []
    subscription = ReplayGateway(_records(20.0), interval=0).subscribe(received.append)

    await asyncio.wait_for(subscription.wait_exhausted(), timeout=1.0)
    await asyncio.sleep(0.01)

    assert len(received) == 2
    assert subscription.exhausted
    subscription.unsubscribe()


@pytest.mark.asyncio
async def test_empty_dataset_is_exhausted_immediately() -> None:
    subscription = ReplayGateway([], interval=0).subscribe(lambda _u: None)

    await asyncio.wait_for(subscription.wait_exhausted(), timeout=1.0)

    subscription.unsubscribe()


@pytest.mark.asyncio
async def test_unsubscribe_inside_callback_stops_delivery_immediately() -> None:
    received: list[SensorUpdate] = []
    holder: list[ReplaySubscription] = []

    def on_update(update: SensorUpdate) -> None:
        received.append(update)
        holder[0].unsubscribe()

    holder.append(ReplayGateway(_records(10.0, 20.0, 30.0), interval=0).subscribe(on_update))
    await asyncio.sleep(0.05)

    assert len(received) == 1
    assert not holder[0].is_active
    assert not holder[0].exhausted


@pytest.mark.asyncio
async def test_unsubscribe_between_ticks_cancels_the_timer() -> None:
    received: list[SensorUpdate] = []
    subscription = ReplayGateway(_records(10.0, 20.0), interval=10.0).subscribe(received.append)

    await asyncio.sleep(0.01)
    subscription.unsubscribe()
    subscription.unsubscribe()
    await asyncio.sleep(0.01)

    assert received == []


@pytest.mark.asyncio
async def test_status_reports_connected_then_closed() -> None:
    statuses: list[tuple[ConnectionStatus, TransportError | None]] = []
    subscription = ReplayGateway(_records(1.0), interval=0).subscribe(
        lambda _u: None,
        on_status=lambda status, error: statuses.append((status, error)),
    )

    await asyncio.wait_for(subscription.wait_exhausted(), timeout=1.0)
    subscription.unsubscribe()

    assert statuses == [(ConnectionStatus.CONNECTED, None), (ConnectionStatus.CLOSED, None)]


@pytest.mark.asyncio
async def test_unsubscribe_releases_exhaustion_waiters() -> None:
    subscription = ReplayGateway(_records(10.0, 20.0), interval=10.0).subscribe(lambda _u: None)
    waiter = asyncio.create_task(subscription.wait_exhausted())
    await asyncio.sleep(0.01)
    assert not waiter.done()

    subscription.unsubscribe()
    await asyncio.wait_for(waiter, timeout=0.5)

    assert not subscription.exhausted
    assert subscription.position == 0
