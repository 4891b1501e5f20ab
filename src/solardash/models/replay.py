"""Replay dataset records."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, field_validator


class ReplayRecord(BaseModel):
    """One recorded sample, ``{"energy": <number>, ...}``.

    Extra keys (timestamps, site ids) are accepted and ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    energy: float

    @field_validator("energy", mode="before")
    @classmethod
    def _reject_non_numbers(cls, value: object) -> object:
        # JSON strings and booleans are not readings.
        if isinstance(value, (str, bool)) or value is None:
            raise ValueError(f"energy must be a number, got {value!r}")
        return value

    @field_validator("energy")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("energy must be finite")
        return value
