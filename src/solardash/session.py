"""Dashboard session: one state cell fed by one gateway subscription."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from solardash._constants import HISTORY_LIMIT
from solardash.config import DashboardConfig
from solardash.exceptions import SolarDashError, TransportError
from solardash.gateway.base import ConnectionStatus, Gateway, Subscription
from solardash.gateway.factory import build_gateway
from solardash.models.state import SystemState
from solardash.models.update import SensorUpdate
from solardash.state.insights import EnergyInsights, energy_insights
from solardash.state.store import StateCell

_logger = logging.getLogger(__name__)


class DashboardSession:
    """Owns the rolling state for one dashboard view.

    Usage::

        async with await DashboardSession.open(DashboardConfig.from_env()) as session:
            ...
            print(session.state.to_payload())

    The session's state is created on enter and discarded on exit; nothing
    is shared with other sessions.
    """

    def __init__(
        self,
        gateway: Gateway,
        *,
        history_limit: int = HISTORY_LIMIT,
        on_snapshot: Callable[[SystemState], None] | None = None,
        on_status: Callable[[ConnectionStatus, TransportError | None], None] | None = None,
    ) -> None:
        self._gateway = gateway
        self._history_limit = history_limit
        self._on_snapshot = on_snapshot
        self._on_status_cb = on_status
        self._cell: StateCell | None = None
        self._subscription: Subscription | None = None
        self._status = ConnectionStatus.CLOSED
        self._last_error: TransportError | None = None

    @classmethod
    async def open(
        cls,
        config: DashboardConfig,
        *,
        http_session: aiohttp.ClientSession | None = None,
        **kwargs: Any,
    ) -> DashboardSession:
        """Build the gateway named by *config*; replay datasets load here."""
        gateway = await build_gateway(config, http_session=http_session)
        kwargs.setdefault("history_limit", config.history_limit)
        return cls(gateway, **kwargs)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DashboardSession:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()

    def start(self) -> None:
        if self._cell is not None:
            raise SolarDashError("Session already started")
        cell = StateCell(history_limit=self._history_limit, logger=_logger)
        if self._on_snapshot is not None:
            cell.add_listener(self._on_snapshot)
        self._cell = cell
        try:
            self._subscription = self._gateway.subscribe(self._on_update, on_status=self._on_status)
        except Exception:
            cell.close()
            self._cell = None
            raise
        _logger.debug("Dashboard session started with %s", type(self._gateway).__name__)

    def close(self) -> None:
        """Stop updates and drop the state.  Safe to call twice."""
        subscription = self._subscription
        self._subscription = None
        if subscription is not None:
            subscription.unsubscribe()
        if self._cell is not None:
            self._cell.close()
        self._status = ConnectionStatus.CLOSED

    # ------------------------------------------------------------------
    # Gateway callbacks
    # ------------------------------------------------------------------

    def _on_update(self, update: SensorUpdate) -> None:
        cell = self._cell
        if cell is None:
            return
        cell.apply(update)

    def _on_status(self, status: ConnectionStatus, error: TransportError | None) -> None:
        self._status = status
        if error is not None:
            self._last_error = error
            _logger.warning("Connectivity degraded: %s", error)
        elif status is ConnectionStatus.CONNECTED:
            self._last_error = None
        if self._on_status_cb is not None:
            try:
                self._on_status_cb(status, error)
            except Exception:
                _logger.debug("on_status callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def _require_cell(self) -> StateCell:
        if self._cell is None:
            raise SolarDashError("Session not started. Use 'async with DashboardSession(...) as session:'")
        return self._cell

    @property
    def state(self) -> SystemState:
        return self._require_cell().state

    @property
    def subscription(self) -> Subscription | None:
        return self._subscription

    @property
    def connection_status(self) -> ConnectionStatus:
        return self._status

    @property
    def last_error(self) -> TransportError | None:
        return self._last_error

    def insights(self) -> EnergyInsights | None:
        return energy_insights(self.state.energy_history)
