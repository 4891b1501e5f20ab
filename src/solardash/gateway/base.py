"""Gateway interface shared by the live and replay sources.

A gateway turns some event source into a stream of
:class:`~solardash.models.SensorUpdate` values delivered to a callback.
The state layer only sees that callback, so it cannot tell a broker
from a recorded dataset.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

from solardash.exceptions import TransportError
from solardash.models.update import SensorUpdate


class ConnectionStatus(StrEnum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DEGRADED = "degraded"
    CLOSED = "closed"


UpdateCallback = Callable[[SensorUpdate], None]
StatusCallback = Callable[[ConnectionStatus, TransportError | None], None]


class Subscription(Protocol):
    """Handle returned by :meth:`Gateway.subscribe`."""

    @property
    def is_active(self) -> bool: ...

    def unsubscribe(self) -> None:
        """Stop delivery and release the underlying resource.

        Synchronous and idempotent.  Once it returns, the update callback
        is not invoked again.
        """
        ...


class Gateway(Protocol):
    def subscribe(
        self,
        on_update: UpdateCallback,
        *,
        on_status: StatusCallback | None = None,
    ) -> Subscription: ...
