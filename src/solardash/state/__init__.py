"""State layer.

Pure merge and rule logic plus the session-owned cell that holds the
canonical snapshot.
"""

from solardash.state.aggregator import merge
from solardash.state.insights import EnergyInsights, energy_insights
from solardash.state.rules import DerivedStatus, GridMode, Transition, classify, evaluate
from solardash.state.store import StateCell

__all__ = [
    "DerivedStatus",
    "EnergyInsights",
    "GridMode",
    "StateCell",
    "Transition",
    "classify",
    "energy_insights",
    "evaluate",
    "merge",
]
