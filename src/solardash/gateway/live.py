"""Live MQTT gateway.

paho-mqtt runs its network loop on a background thread.  Messages are
decoded there and handed to the asyncio loop with
``call_soon_threadsafe``; delivery re-checks the subscription on the
loop thread, which is what makes teardown final.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any, cast

import paho.mqtt.client as mqtt

from solardash.config import BrokerAddress, DashboardConfig
from solardash.exceptions import DecodeError, TransportError
from solardash.gateway.base import ConnectionStatus, StatusCallback, UpdateCallback
from solardash.ingestion.decode import decode
from solardash.models.update import SensorUpdate, UpdateSource

_logger = logging.getLogger(__name__)


def _reason_value(reason_code: Any) -> int | None:
    value = getattr(reason_code, "value", reason_code)
    return value if isinstance(value, int) else None


class MqttSubscription:
    """One broker connection feeding one update callback."""

    def __init__(
        self,
        *,
        broker: BrokerAddress,
        channels: Sequence[str],
        loop: asyncio.AbstractEventLoop,
        on_update: UpdateCallback,
        on_status: StatusCallback | None,
        client_id: str = "",
        keepalive: int = 60,
        logger: logging.Logger | None = None,
    ) -> None:
        self._broker = broker
        self._channels = tuple(channels)
        self._loop = loop
        self._on_update = on_update
        self._on_status = on_status
        self._client_id = client_id
        self._keepalive = keepalive
        self._logger = logger or _logger
        self._client: mqtt.Client | None = None
        self._active = False
        self.dropped = 0

    @property
    def is_active(self) -> bool:
        return self._active

    # ------------------------------------------------------------------
    # Loop-thread side
    # ------------------------------------------------------------------

    def _post(self, callback: Callable[..., None], *args: Any) -> None:
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            # Event loop already closed; nothing left to deliver to.
            self._logger.debug("MQTT event after loop shutdown dropped")

    def _deliver(self, update: SensorUpdate) -> None:
        if not self._active:
            return
        try:
            self._on_update(update)
        except Exception:
            self._logger.debug("Update callback failed", exc_info=True)

    def _report(self, status: ConnectionStatus, error: TransportError | None = None) -> None:
        if self._on_status is None:
            return
        if status is not ConnectionStatus.CLOSED and not self._active:
            return
        try:
            self._on_status(status, error)
        except Exception:
            self._logger.debug("Status callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Network-thread side
    # ------------------------------------------------------------------

    def _handle_connect(
        self,
        client: mqtt.Client,
        _userdata: Any,
        _flags: Any,
        reason_code: Any,
        _properties: Any,
    ) -> None:
        code = _reason_value(reason_code)
        if code:
            self._logger.warning("MQTT connect to %s failed: %s", self._broker.display, reason_code)
            error = TransportError(
                f"Connect to {self._broker.display} refused: {reason_code}",
                broker=self._broker.display,
                reason_code=code,
            )
            self._post(self._report, ConnectionStatus.DEGRADED, error)
            return
        self._logger.debug("MQTT connected to %s, subscribing %d channels", self._broker.display, len(self._channels))
        # Subscribe on every (re)connect; clean sessions forget subscriptions.
        client.subscribe([(channel, 0) for channel in self._channels])
        self._post(self._report, ConnectionStatus.CONNECTED, None)

    def _handle_connect_fail(self, _client: mqtt.Client, _userdata: Any) -> None:
        self._logger.warning("MQTT broker %s unreachable", self._broker.display)
        error = TransportError(f"Broker {self._broker.display} unreachable", broker=self._broker.display)
        self._post(self._report, ConnectionStatus.DEGRADED, error)

    def _handle_disconnect(
        self,
        _client: mqtt.Client,
        _userdata: Any,
        _disconnect_flags: Any,
        reason_code: Any,
        _properties: Any,
    ) -> None:
        if not self._active:
            return
        self._logger.debug("MQTT disconnected: %s", reason_code)
        error = TransportError(
            f"Disconnected from {self._broker.display}: {reason_code}",
            broker=self._broker.display,
            reason_code=_reason_value(reason_code),
        )
        self._post(self._report, ConnectionStatus.DEGRADED, error)

    def _handle_message(self, _client: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
        try:
            update = decode(msg.topic, msg.payload, source=UpdateSource.LIVE)
        except DecodeError as exc:
            self.dropped += 1
            self._logger.warning("Dropping message on %s: %s", exc.topic, exc)
            return
        self._logger.debug("Received %s=%r on %s", update.field, update.value, msg.topic)
        self._post(self._deliver, update)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Create the client and start its network loop.

        Raises
        ------
        TransportError
            The client could not be set up (bad address, TLS setup failure).
            Later connection problems are reported through ``on_status``.
        """
        broker = self._broker
        self._logger.debug(
            "MQTT gateway start requested host=%s port=%s transport=%s channels=%s",
            broker.host,
            broker.port,
            broker.transport,
            self._channels,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
            transport=broker.transport,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)
        if broker.transport == "websockets":
            client.ws_set_options(path=broker.path)

        client.on_connect = self._handle_connect
        client.on_connect_fail = self._handle_connect_fail
        client.on_disconnect = self._handle_disconnect
        client.on_message = self._handle_message

        self._active = True
        try:
            if broker.tls:
                client.tls_set()
            client.connect_async(broker.host, broker.port, keepalive=self._keepalive)
            client.loop_start()
        except (OSError, ValueError) as exc:
            self._active = False
            raise TransportError(f"MQTT setup for {broker.display} failed: {exc}", broker=broker.display) from exc

        self._client = client
        self._report(ConnectionStatus.CONNECTING)
        self._logger.debug("MQTT network loop started")

    def unsubscribe(self) -> None:
        client = self._client
        self._client = None
        was_active = self._active
        self._active = False

        if client is None:
            return
        try:
            if was_active:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
            self._report(ConnectionStatus.CLOSED)


class MqttGateway:
    """Subscribes to every sensor channel on one broker."""

    def __init__(
        self,
        *,
        broker: BrokerAddress,
        channels: Sequence[str],
        client_id: str = "",
        keepalive: int = 60,
        loop: asyncio.AbstractEventLoop | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._broker = broker
        self._channels = tuple(channels)
        self._client_id = client_id
        self._keepalive = keepalive
        self._loop = loop
        self._logger = logger or _logger

    @classmethod
    def from_config(cls, config: DashboardConfig, **kwargs: Any) -> MqttGateway:
        return cls(
            broker=config.broker,
            channels=list(config.channels.values()),
            client_id=config.client_id,
            keepalive=config.mqtt_keepalive,
            **kwargs,
        )

    @property
    def channels(self) -> tuple[str, ...]:
        return self._channels

    def subscribe(
        self,
        on_update: UpdateCallback,
        *,
        on_status: StatusCallback | None = None,
    ) -> MqttSubscription:
        """Open a connection and start delivering updates.

        Must be called with a running event loop unless one was passed to
        the constructor.
        """
        subscription = MqttSubscription(
            broker=self._broker,
            channels=self._channels,
            loop=self._loop or asyncio.get_running_loop(),
            on_update=on_update,
            on_status=on_status,
            client_id=self._client_id,
            keepalive=self._keepalive,
            logger=self._logger,
        )
        subscription.start()
        return subscription
