"""Session-owned state cell.

This is the only component allowed to replace the canonical
:class:`SystemState`.  Every update goes through :meth:`StateCell.apply`,
which serializes merges so a gateway that happens to deliver from more
than one thread still produces a single ordered history.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from solardash._constants import HISTORY_LIMIT
from solardash.models.state import SystemState
from solardash.models.update import SensorUpdate
from solardash.state.aggregator import merge

_logger = logging.getLogger(__name__)

SnapshotListener = Callable[[SystemState], None]


class StateCell:
    """Holds the current snapshot for one dashboard session.

    Lifecycle: created with a default :class:`SystemState`, advanced only
    by :meth:`apply`, and closed when the session ends.  Updates that
    arrive after :meth:`close` are ignored.
    """

    def __init__(
        self,
        *,
        initial: SystemState | None = None,
        history_limit: int = HISTORY_LIMIT,
        logger: logging.Logger | None = None,
    ) -> None:
        self._state = initial if initial is not None else SystemState()
        self._history_limit = history_limit
        self._logger = logger or _logger
        self._lock = threading.RLock()
        self._listeners: list[SnapshotListener] = []
        self._closed = False
        self._applied = 0

    @property
    def state(self) -> SystemState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def applied_count(self) -> int:
        """Number of updates merged so far."""
        return self._applied

    def add_listener(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _remove

    def apply(self, update: SensorUpdate) -> SystemState | None:
        """Merge *update* and notify listeners.

        Listeners run while the cell is held, so they see snapshots in the
        order they were produced.  Returns the new snapshot, or ``None``
        when the cell is closed.
        """
        with self._lock:
            if self._closed:
                self._logger.debug("Dropping %s update, state cell closed", update.field)
                return None
            snapshot = merge(self._state, update, history_limit=self._history_limit)
            self._state = snapshot
            self._applied += 1

            for listener in list(self._listeners):
                try:
                    listener(snapshot)
                except Exception:
                    self._logger.debug("Snapshot listener failed", exc_info=True)
            return snapshot

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._listeners.clear()
