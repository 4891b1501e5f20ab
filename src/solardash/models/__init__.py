"""Data models for solardash."""

from solardash.models.replay import ReplayRecord
from solardash.models.state import EnergyPoint, ImpactPoint, Reading, SystemState
from solardash.models.update import NUMERIC_FIELDS, SensorField, SensorUpdate, UpdateSource

__all__ = [
    "NUMERIC_FIELDS",
    "EnergyPoint",
    "ImpactPoint",
    "Reading",
    "ReplayRecord",
    "SensorField",
    "SensorUpdate",
    "SystemState",
    "UpdateSource",
]
