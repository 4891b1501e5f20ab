"""Rolling state aggregation.

:func:`merge` is the only place a :class:`SystemState` is derived from
an update.  It is pure: the prior snapshot is never touched and the
caller decides where the result is stored.

Step order matters and is kept stable for reproducibility:

1. overwrite the updated field,
2. append energy and impact history points (snapshot of current values),
3. run the status rules,
4. bump impact when energy is high,
5. flag maintenance when impact is high.

Because step 4 runs after the history snapshot, an energy spike shows up
in ``impact_history`` one update later.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, TypeVar

from solardash._constants import (
    ENERGY_IMPACT_THRESHOLD,
    HISTORY_LIMIT,
    IMPACT_MAINTENANCE_THRESHOLD,
    MAINTENANCE_REQUIRED,
)
from solardash.ingestion.normalize import as_number, exceeds
from solardash.models.state import EnergyPoint, ImpactPoint, SystemState
from solardash.models.update import SensorUpdate
from solardash.state.rules import evaluate

TPoint = TypeVar("TPoint", EnergyPoint, ImpactPoint)


def _append_bounded(history: Sequence[TPoint], point: TPoint, limit: int) -> tuple[TPoint, ...]:
    """Append *point*, dropping the oldest entries beyond *limit*."""
    extended = (*history, point)
    return extended[-limit:]


def _stamp(history: Sequence[EnergyPoint] | Sequence[ImpactPoint], received_at: datetime) -> datetime:
    # History stamps never go backwards, even if the wall clock does.
    if history and history[-1].time > received_at:
        return history[-1].time
    return received_at


def merge(state: SystemState, update: SensorUpdate, *, history_limit: int = HISTORY_LIMIT) -> SystemState:
    """Fold one update into *state* and return the new snapshot."""
    values: dict[str, Any] = state.model_dump(exclude={"energy_history", "impact_history"})
    values[update.field.value] = update.value

    energy_history = _append_bounded(
        state.energy_history,
        EnergyPoint(time=_stamp(state.energy_history, update.received_at), energy=values["energy"]),
        history_limit,
    )
    impact_history = _append_bounded(
        state.impact_history,
        ImpactPoint(time=_stamp(state.impact_history, update.received_at), impact=values["impact"]),
        history_limit,
    )

    status = evaluate(values["voltage"], values["smoke"], values["microgrid"], values["emergency"])
    values["emergency"] = status.emergency
    values["microgrid"] = status.microgrid

    if exceeds(values["energy"], ENERGY_IMPACT_THRESHOLD):
        impact = as_number(values["impact"])
        if impact is not None:
            values["impact"] = impact + 1

    if exceeds(values["impact"], IMPACT_MAINTENANCE_THRESHOLD):
        values["maintenance"] = MAINTENANCE_REQUIRED

    return state.model_copy(
        update={
            **values,
            "energy_history": energy_history,
            "impact_history": impact_history,
        }
    )
