"""Window-level energy insights.

Read-only summaries over the energy history, as shown by the static
replay dashboard: performance, grid load and surge alerts.  They never
feed back into :func:`solardash.state.aggregator.merge`.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from solardash._constants import INSIGHT_HIGH_AVERAGE, INSIGHT_LOW_AVERAGE, INSIGHT_SURGE_LEVEL
from solardash.ingestion.normalize import as_number
from solardash.models.state import EnergyPoint

PERFORMANCE_OK = "All systems operational"
PERFORMANCE_DEGRADED = "Performance Degradation Detected!"

GRID_OVERLOAD = "Overload"
GRID_UNDERUTILIZED = "Underutilized"
GRID_STABLE = "Stable"

SURGE_ALERT = "High Energy Surge Detected!"
SURGE_CLEAR = "All systems operational"


class EnergyInsights(BaseModel):
    model_config = ConfigDict(frozen=True)

    average: float
    latest: float | None
    samples: int
    performance: str
    grid_load: str
    surge: str


def energy_insights(history: Sequence[EnergyPoint]) -> EnergyInsights | None:
    """Summarize an energy window; ``None`` when it holds no numeric samples."""
    readings = [number for point in history if (number := as_number(point.energy)) is not None]
    if not readings:
        return None

    average = sum(readings) / len(readings)
    latest = as_number(history[-1].energy)

    if average > INSIGHT_HIGH_AVERAGE:
        grid_load = GRID_OVERLOAD
    elif average < INSIGHT_LOW_AVERAGE:
        grid_load = GRID_UNDERUTILIZED
    else:
        grid_load = GRID_STABLE

    return EnergyInsights(
        average=average,
        latest=latest,
        samples=len(readings),
        performance=PERFORMANCE_DEGRADED if average < INSIGHT_LOW_AVERAGE else PERFORMANCE_OK,
        grid_load=grid_load,
        surge=SURGE_ALERT if latest is not None and latest > INSIGHT_SURGE_LEVEL else SURGE_CLEAR,
    )
