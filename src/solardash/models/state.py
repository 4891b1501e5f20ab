"""Rolling dashboard state snapshot.

:class:`SystemState` is immutable; the aggregator produces a new
snapshot per update and the owning state cell swaps it in.  Field
names are snake_case in Python and camelCase in :meth:`SystemState.to_payload`
so renderers see the same keys the browser dashboard always used
(``energyHistory``, ``impactHistory``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from solardash._constants import EMERGENCY_SAFE, MAINTENANCE_OPERATIONAL, MICROGRID_STABLE

#: Scalar telemetry value: numeric readings, or raw text when a payload did not parse.
Reading = float | str


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class EnergyPoint(_SnapshotModel):
    time: datetime
    energy: Reading


class ImpactPoint(_SnapshotModel):
    time: datetime
    impact: Reading


class SystemState(_SnapshotModel):
    """Canonical rolling snapshot for one dashboard session."""

    voltage: Reading = 0.0
    smoke: Reading = 0.0
    energy: Reading = 0.0
    impact: Reading = 0.0
    maintenance: Reading = MAINTENANCE_OPERATIONAL
    microgrid: Reading = MICROGRID_STABLE
    emergency: Reading = EMERGENCY_SAFE
    energy_history: tuple[EnergyPoint, ...] = Field(default_factory=tuple)
    impact_history: tuple[ImpactPoint, ...] = Field(default_factory=tuple)

    @property
    def last_updated(self) -> datetime | None:
        """Arrival time of the most recent merged update, if any."""
        if not self.energy_history:
            return None
        return self.energy_history[-1].time

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict for rendering collaborators."""
        return self.model_dump(mode="json", by_alias=True)
