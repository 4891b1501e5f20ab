"""Dashboard configuration for solardash."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from solardash._constants import (
    DEFAULT_BROKER_URL,
    DEFAULT_REPLAY_URL,
    DEFAULT_TOPIC_PREFIX,
    HISTORY_LIMIT,
    REPLAY_INTERVAL,
)
from solardash.exceptions import ConfigError
from solardash.models.update import SensorField

MODES: frozenset[str] = frozenset({"live", "replay"})

_DEFAULT_PORTS: dict[str, int] = {
    "tcp": 1883,
    "mqtt": 1883,
    "ssl": 8883,
    "mqtts": 8883,
    "ws": 9001,
    "wss": 443,
}


@dataclasses.dataclass(frozen=True)
class BrokerAddress:
    """Connection details parsed from a broker URL."""

    host: str
    port: int
    transport: str = "tcp"
    tls: bool = False
    path: str = "/mqtt"

    @property
    def display(self) -> str:
        if self.transport == "websockets":
            scheme = "wss" if self.tls else "ws"
        else:
            scheme = "ssl" if self.tls else "tcp"
        return f"{scheme}://{self.host}:{self.port}"


def parse_broker_url(raw_url: str) -> BrokerAddress:
    """Parse ``ws://host:9001`` / ``tcp://host:1883`` / ``host`` into a :class:`BrokerAddress`.

    A missing scheme means plain TCP.  A missing port falls back to the
    scheme's conventional port.
    """
    value = raw_url.strip()
    if not value:
        raise ConfigError("Broker URL is empty")

    scheme = "tcp"
    if "://" in value:
        scheme, value = value.split("://", 1)
        scheme = scheme.strip().lower()
    if scheme not in _DEFAULT_PORTS:
        raise ConfigError(f"Unsupported broker scheme {scheme!r} in {raw_url!r}")

    path = "/mqtt"
    if "/" in value:
        value, _, rest = value.partition("/")
        if rest:
            path = f"/{rest}"

    host, sep, maybe_port = value.rpartition(":")
    if not sep:
        host = value
        port = _DEFAULT_PORTS[scheme]
    elif maybe_port.isdigit():
        port = int(maybe_port)
    else:
        raise ConfigError(f"Invalid broker port {maybe_port!r} in {raw_url!r}")
    if not host:
        raise ConfigError(f"Broker URL {raw_url!r} has no host")

    websockets = scheme in {"ws", "wss"}
    return BrokerAddress(
        host=host,
        port=port,
        transport="websockets" if websockets else "tcp",
        tls=scheme in {"wss", "ssl", "mqtts"},
        path=path,
    )


@dataclasses.dataclass(frozen=True)
class DashboardConfig:
    """Dashboard session configuration.

    Parameters
    ----------
    mode : str
        ``"live"`` subscribes to the MQTT broker, ``"replay"`` plays back
        a recorded energy dataset.
    broker_url : str
        MQTT broker URL. ``ws://``/``wss://`` select the websockets transport.
    topic_prefix : str
        Channel prefix; channels are ``<prefix>/<field>``.
    client_id : str
        MQTT client id. Empty lets the broker assign one.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    history_limit : int
        Number of samples kept in the energy/impact windows.
    replay_url : str
        HTTP endpoint serving the replay dataset.
    replay_path : str or None
        Local dataset file; takes precedence over ``replay_url``.
    replay_interval : float
        Seconds between replayed records.
    """

    mode: str = "live"
    broker_url: str = DEFAULT_BROKER_URL
    topic_prefix: str = DEFAULT_TOPIC_PREFIX
    client_id: str = ""
    mqtt_keepalive: int = 60
    history_limit: int = HISTORY_LIMIT
    replay_url: str = DEFAULT_REPLAY_URL
    replay_path: str | None = None
    replay_interval: float = REPLAY_INTERVAL

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ConfigError(f"mode must be one of {sorted(MODES)}, got {self.mode!r}")
        if self.history_limit < 1:
            raise ConfigError(f"history_limit must be positive, got {self.history_limit}")
        if self.replay_interval < 0:
            raise ConfigError(f"replay_interval must not be negative, got {self.replay_interval}")
        if not self.topic_prefix.strip("/"):
            raise ConfigError("topic_prefix must not be empty")

    @property
    def broker(self) -> BrokerAddress:
        return parse_broker_url(self.broker_url)

    @property
    def channels(self) -> dict[str, str]:
        """Field name → channel name for every tracked field."""
        prefix = self.topic_prefix.strip("/")
        return {field.value: f"{prefix}/{field.value}" for field in SensorField}

    @classmethod
    def from_env(cls, **overrides: Any) -> DashboardConfig:
        """Create configuration from ``SOLAR_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SOLAR_MODE": "mode",
            "SOLAR_BROKER_URL": "broker_url",
            "SOLAR_TOPIC_PREFIX": "topic_prefix",
            "SOLAR_CLIENT_ID": "client_id",
            "SOLAR_REPLAY_URL": "replay_url",
            "SOLAR_REPLAY_PATH": "replay_path",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()

        try:
            keepalive_env = env.get("SOLAR_MQTT_KEEPALIVE")
            if keepalive_env is not None and "mqtt_keepalive" not in overrides:
                config_kwargs["mqtt_keepalive"] = int(keepalive_env)

            limit_env = env.get("SOLAR_HISTORY_LIMIT")
            if limit_env is not None and "history_limit" not in overrides:
                config_kwargs["history_limit"] = int(limit_env)

            interval_env = env.get("SOLAR_REPLAY_INTERVAL")
            if interval_env is not None and "replay_interval" not in overrides:
                config_kwargs["replay_interval"] = float(interval_env)
        except ValueError as exc:
            raise ConfigError(f"Invalid numeric SOLAR_* setting: {exc}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
