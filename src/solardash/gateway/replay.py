"""Replay gateway: plays a recorded energy dataset as if it were live.

Each tick emits two updates stamped with the same wall-clock time: the
recorded energy, then an impact value derived from it.  Both go through
the same merge path as broker messages.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from solardash._constants import REPLAY_IMPACT_FACTOR, REPLAY_INTERVAL
from solardash.gateway.base import ConnectionStatus, StatusCallback, UpdateCallback
from solardash.models.replay import ReplayRecord
from solardash.models.update import SensorField, SensorUpdate, UpdateSource

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def updates_for_record(record: ReplayRecord, received_at: datetime) -> tuple[SensorUpdate, SensorUpdate]:
    """The energy update and its derived impact update for one record."""
    return (
        SensorUpdate(
            field=SensorField.ENERGY,
            value=record.energy,
            received_at=received_at,
            source=UpdateSource.REPLAY,
        ),
        SensorUpdate(
            field=SensorField.IMPACT,
            value=record.energy * REPLAY_IMPACT_FACTOR,
            received_at=received_at,
            source=UpdateSource.REPLAY,
        ),
    )


class ReplaySubscription:
    def __init__(
        self,
        *,
        records: Sequence[ReplayRecord],
        interval: float,
        on_update: UpdateCallback,
        on_status: StatusCallback | None,
        clock: Callable[[], datetime],
        logger: logging.Logger,
    ) -> None:
        self._records = tuple(records)
        self._interval = interval
        self._on_update = on_update
        self._on_status = on_status
        self._clock = clock
        self._logger = logger
        self._active = False
        self._task: asyncio.Task[None] | None = None
        self._exhausted = asyncio.Event()
        self._finished = asyncio.Event()
        self.position = 0

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def exhausted(self) -> bool:
        return self._exhausted.is_set()

    def _report(self, status: ConnectionStatus) -> None:
        if self._on_status is None:
            return
        try:
            self._on_status(status, None)
        except Exception:
            self._logger.debug("Status callback failed", exc_info=True)

    def _emit(self, update: SensorUpdate) -> None:
        try:
            self._on_update(update)
        except Exception:
            self._logger.debug("Update callback failed", exc_info=True)

    async def _run(self) -> None:
        for record in self._records:
            await asyncio.sleep(self._interval)
            if not self._active:
                return
            for update in updates_for_record(record, self._clock()):
                self._emit(update)
                if not self._active:
                    return
            self.position += 1
        self._logger.debug("Replay dataset exhausted after %d records", self.position)
        self._exhausted.set()
        self._finished.set()

    def start(self) -> None:
        self._active = True
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._report(ConnectionStatus.CONNECTED)

    async def wait_exhausted(self) -> None:
        """Wait until every record has been emitted or the replay is torn down.

        Check :attr:`exhausted` afterwards to tell the two apart.
        """
        await self._finished.wait()

    def unsubscribe(self) -> None:
        was_active = self._active
        self._active = False
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
        self._finished.set()
        if was_active:
            self._logger.debug("Replay stopped at record %d/%d", self.position, len(self._records))
            self._report(ConnectionStatus.CLOSED)


class ReplayGateway:
    """Feeds a dataset loaded once at startup, one record per tick."""

    def __init__(
        self,
        records: Sequence[ReplayRecord],
        *,
        interval: float = REPLAY_INTERVAL,
        clock: Callable[[], datetime] = _utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self._records = tuple(records)
        self._interval = interval
        self._clock = clock
        self._logger = logger or _logger

    @property
    def records(self) -> tuple[ReplayRecord, ...]:
        return self._records

    def subscribe(
        self,
        on_update: UpdateCallback,
        *,
        on_status: StatusCallback | None = None,
    ) -> ReplaySubscription:
        """Start replaying on the running event loop."""
        subscription = ReplaySubscription(
            records=self._records,
            interval=self._interval,
            on_update=on_update,
            on_status=on_status,
            clock=self._clock,
            logger=self._logger,
        )
        subscription.start()
        return subscription
