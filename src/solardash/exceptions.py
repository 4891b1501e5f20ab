"""Custom exception hierarchy for solardash."""

from __future__ import annotations


class SolarDashError(Exception):
    """Base exception for all solardash errors."""


class ConfigError(SolarDashError):
    """Invalid or missing configuration."""


class DecodeError(SolarDashError):
    """Inbound message could not be mapped to a known sensor field.

    Non-fatal: the gateway drops the message and logs it, the session
    keeps running.
    """

    def __init__(self, message: str, *, topic: str = "") -> None:
        self.topic = topic
        super().__init__(message)


class TransportError(SolarDashError):
    """Broker connection failure (connect refused, unexpected disconnect)."""

    def __init__(
        self,
        message: str,
        *,
        broker: str = "",
        reason_code: int | None = None,
    ) -> None:
        self.broker = broker
        self.reason_code = reason_code
        super().__init__(message)


class DatasetLoadError(SolarDashError):
    """Replay dataset could not be fetched or has the wrong shape."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)
