"""Derived-status rules for the emergency and microgrid fields.

The microgrid behaves as a two-state machine:

* ``STABLE`` → ``SHUTTING_DOWN`` when voltage or smoke breaches its limit.
* ``SHUTTING_DOWN`` → ``STABLE`` once a single sample has both readings
  back within limits.

``emergency`` mirrors it (``Safe`` / critical alert).  Anything that is
neither a breach nor a recovery passes both status fields through, so a
cold system never has its defaults rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from solardash._constants import (
    EMERGENCY_CRITICAL,
    EMERGENCY_SAFE,
    MICROGRID_SHUTTING_DOWN,
    MICROGRID_STABLE,
    SMOKE_LIMIT,
    VOLTAGE_LIMIT,
)
from solardash.ingestion.normalize import exceeds, within


class GridMode(StrEnum):
    STABLE = "stable"
    SHUTTING_DOWN = "shutting_down"

    @classmethod
    def of(cls, microgrid: Any) -> GridMode:
        """Classify a microgrid status string; only the shutdown text counts as shutting down."""
        if microgrid == MICROGRID_SHUTTING_DOWN:
            return cls.SHUTTING_DOWN
        return cls.STABLE


class Transition(StrEnum):
    TRIP = "trip"
    RECOVER = "recover"
    HOLD = "hold"


@dataclass(frozen=True, slots=True)
class DerivedStatus:
    emergency: Any
    microgrid: Any


def classify(voltage: Any, smoke: Any, mode: GridMode) -> Transition:
    """Pick the transition for one sample, first matching rule wins."""
    if exceeds(voltage, VOLTAGE_LIMIT) or exceeds(smoke, SMOKE_LIMIT):
        return Transition.TRIP
    if mode is GridMode.SHUTTING_DOWN and within(voltage, VOLTAGE_LIMIT) and within(smoke, SMOKE_LIMIT):
        return Transition.RECOVER
    return Transition.HOLD


def evaluate(
    voltage: Any,
    smoke: Any,
    prior_microgrid: Any,
    prior_emergency: Any = EMERGENCY_SAFE,
) -> DerivedStatus:
    """Compute ``emergency``/``microgrid`` from the current readings and prior status."""
    transition = classify(voltage, smoke, GridMode.of(prior_microgrid))
    if transition is Transition.TRIP:
        return DerivedStatus(emergency=EMERGENCY_CRITICAL, microgrid=MICROGRID_SHUTTING_DOWN)
    if transition is Transition.RECOVER:
        return DerivedStatus(emergency=EMERGENCY_SAFE, microgrid=MICROGRID_STABLE)
    return DerivedStatus(emergency=prior_emergency, microgrid=prior_microgrid)
