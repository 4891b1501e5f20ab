"""Decoded single-field sensor updates."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SensorField(StrEnum):
    """The seven quantities tracked by the dashboard, one channel each."""

    VOLTAGE = "voltage"
    SMOKE = "smoke"
    ENERGY = "energy"
    MAINTENANCE = "maintenance"
    IMPACT = "impact"
    MICROGRID = "microgrid"
    EMERGENCY = "emergency"

    @property
    def is_numeric(self) -> bool:
        return self in NUMERIC_FIELDS


NUMERIC_FIELDS: frozenset[SensorField] = frozenset(
    {SensorField.VOLTAGE, SensorField.SMOKE, SensorField.ENERGY, SensorField.IMPACT}
)


class UpdateSource(StrEnum):
    LIVE = "live"
    REPLAY = "replay"


class SensorUpdate(BaseModel):
    """One decoded field change.

    ``value`` is a float whenever the payload parsed as a finite number
    and the raw text otherwise; numeric and status fields share one
    decode path so either shape may appear on any field.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: SensorField
    value: float | str
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    source: UpdateSource = UpdateSource.LIVE

    @field_validator("received_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
