from __future__ import annotations

import pytest

from solardash._constants import (
    EMERGENCY_CRITICAL,
    EMERGENCY_SAFE,
    MICROGRID_SHUTTING_DOWN,
    MICROGRID_STABLE,
)
from solardash.state.rules import GridMode, Transition, classify, evaluate


def test_voltage_breach_trips_shutdown() -> None:
    status = evaluate(260, 0, MICROGRID_STABLE)

    assert status.emergency == EMERGENCY_CRITICAL
    assert status.microgrid == MICROGRID_SHUTTING_DOWN


def test_smoke_breach_trips_shutdown() -> None:
    status = evaluate(230, 6, MICROGRID_STABLE)

    assert status.emergency == EMERGENCY_CRITICAL
    assert status.microgrid == MICROGRID_SHUTTING_DOWN


def test_recovery_from_shutdown() -> None:
    status = evaluate(200, 1, MICROGRID_SHUTTING_DOWN, EMERGENCY_CRITICAL)

    assert status.microgrid == MICROGRID_STABLE
    assert status.emergency == EMERGENCY_SAFE


def test_no_spurious_recovery_on_cold_system() -> None:
    status = evaluate(200, 1, MICROGRID_STABLE, EMERGENCY_SAFE)

    assert status.microgrid == MICROGRID_STABLE
    assert status.emergency == EMERGENCY_SAFE


def test_hold_passes_custom_status_strings_through() -> None:
    status = evaluate(230, 2, "Islanded", "Inspect inverter")

    assert status.microgrid == "Islanded"
    assert status.emergency == "Inspect inverter"


def test_breach_wins_over_recovery() -> None:
    assert classify(251, 0, GridMode.SHUTTING_DOWN) is Transition.TRIP


def test_limits_are_inclusive_for_recovery() -> None:
    assert classify(250, 5, GridMode.STABLE) is Transition.HOLD
    assert classify(250, 5, GridMode.SHUTTING_DOWN) is Transition.RECOVER


@pytest.mark.parametrize(
    ("voltage", "smoke"),
    [("offline", 1), (200, "sensor fault"), ("offline", "sensor fault")],
)
def test_text_readings_neither_trip_nor_recover(voltage: object, smoke: object) -> None:
    assert classify(voltage, smoke, GridMode.SHUTTING_DOWN) is Transition.HOLD
    assert classify(voltage, smoke, GridMode.STABLE) is Transition.HOLD


def test_grid_mode_only_recognizes_shutdown_text() -> None:
    assert GridMode.of(MICROGRID_SHUTTING_DOWN) is GridMode.SHUTTING_DOWN
    assert GridMode.of(MICROGRID_STABLE) is GridMode.STABLE
    assert GridMode.of("Overload") is GridMode.STABLE
    assert GridMode.of(0.0) is GridMode.STABLE
