from __future__ import annotations

import random
from datetime import UTC, datetime, timedelta

import pytest

from solardash._constants import (
    EMERGENCY_CRITICAL,
    EMERGENCY_SAFE,
    MAINTENANCE_OPERATIONAL,
    MAINTENANCE_REQUIRED,
    MICROGRID_SHUTTING_DOWN,
    MICROGRID_STABLE,
)
from solardash.ingestion.decode import decode
from solardash.models.state import SystemState
from solardash.models.update import SensorField, SensorUpdate
from solardash.simulator import readings_to_messages, simulate_readings
from solardash.state.aggregator import merge

_T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _at(seconds: float) -> datetime:
    return _T0 + timedelta(seconds=seconds)


def _update(field: SensorField, value: float | str, seconds: float = 0.0) -> SensorUpdate:
    return SensorUpdate(field=field, value=value, received_at=_at(seconds))


def _scalars(state: SystemState) -> dict[str, object]:
    return state.model_dump(exclude={"energy_history", "impact_history"})


def test_fresh_state_defaults() -> None:
    state = SystemState()

    assert state.voltage == 0.0
    assert state.maintenance == MAINTENANCE_OPERATIONAL
    assert state.microgrid == MICROGRID_STABLE
    assert state.emergency == EMERGENCY_SAFE
    assert state.energy_history == ()
    assert state.last_updated is None


def test_merge_overwrites_field_and_snapshots_history() -> None:
    state = merge(SystemState(), _update(SensorField.ENERGY, 42.0, 1))

    assert state.energy == 42.0
    assert [(p.time, p.energy) for p in state.energy_history] == [(_at(1), 42.0)]
    assert [(p.time, p.impact) for p in state.impact_history] == [(_at(1), 0.0)]
    assert state.last_updated == _at(1)


def test_merge_does_not_touch_prior_state() -> None:
    prior = merge(SystemState(), _update(SensorField.VOLTAGE, 230.0, 1))

    merge(prior, _update(SensorField.VOLTAGE, 260.0, 2))

    assert prior.voltage == 230.0
    assert prior.microgrid == MICROGRID_STABLE
    assert len(prior.energy_history) == 1


def test_every_update_appends_history_even_for_status_fields() -> None:
    state = SystemState()
    state = merge(state, _update(SensorField.ENERGY, 30.0, 1))
    state = merge(state, _update(SensorField.MAINTENANCE, "Panel Cleaning", 2))

    assert [p.energy for p in state.energy_history] == [30.0, 30.0]
    assert state.maintenance == "Panel Cleaning"


def test_history_is_bounded_with_oldest_evicted_first() -> None:
    state = SystemState()
    for i in range(25):
        state = merge(state, _update(SensorField.ENERGY, float(i), i))

    assert len(state.energy_history) == 20
    assert len(state.impact_history) == 20
    assert [p.energy for p in state.energy_history] == [float(i) for i in range(5, 25)]
    assert state.energy_history[0].time == _at(5)


def test_custom_history_limit() -> None:
    state = SystemState()
    for i in range(5):
        state = merge(state, _update(SensorField.SMOKE, 1.0, i), history_limit=3)

    assert len(state.energy_history) == 3


def test_history_stamps_never_go_backwards() -> None:
    state = merge(SystemState(), _update(SensorField.ENERGY, 10.0, 10))
    state = merge(state, _update(SensorField.ENERGY, 11.0, 5))

    times = [p.time for p in state.energy_history]
    assert times == [_at(10), _at(10)]


def test_repeated_value_changes_no_scalar_but_grows_history() -> None:
    state = merge(SystemState(), _update(SensorField.ENERGY, 50.0, 1))

    again = merge(state, _update(SensorField.ENERGY, 50.0, 2))

    assert _scalars(again) == _scalars(state)
    assert len(again.energy_history) == len(state.energy_history) + 1


def test_voltage_breach_then_recovery() -> None:
    state = merge(SystemState(), _update(SensorField.VOLTAGE, 260.0, 1))
    assert state.emergency == EMERGENCY_CRITICAL
    assert state.microgrid == MICROGRID_SHUTTING_DOWN

    state = merge(state, _update(SensorField.SMOKE, 2.0, 2))
    # Voltage is still 260 until a new voltage sample arrives.
    assert state.microgrid == MICROGRID_SHUTTING_DOWN

    state = merge(state, _update(SensorField.VOLTAGE, 230.0, 3))
    assert state.microgrid == MICROGRID_STABLE
    assert state.emergency == EMERGENCY_SAFE


def test_received_status_strings_pass_through_on_a_calm_system() -> None:
    state = merge(SystemState(), _update(SensorField.EMERGENCY, "Critical Alert: Voltage/Smoke High", 1))

    assert state.emergency == "Critical Alert: Voltage/Smoke High"
    assert state.microgrid == MICROGRID_STABLE


def test_received_shutdown_status_recovers_when_readings_are_clear() -> None:
    state = merge(SystemState(), _update(SensorField.MICROGRID, MICROGRID_SHUTTING_DOWN, 1))

    assert state.microgrid == MICROGRID_STABLE
    assert state.emergency == EMERGENCY_SAFE


def test_high_energy_bumps_impact_after_history_snapshot() -> None:
    state = SystemState(impact=3.0)

    state = merge(state, _update(SensorField.ENERGY, 85.0, 1))

    assert state.impact == 4.0
    assert state.impact_history[-1].impact == 3.0

    state = merge(state, _update(SensorField.VOLTAGE, 230.0, 2))

    assert state.impact_history[-1].impact == 4.0
    assert state.impact == 5.0


def test_impact_cascade_sets_maintenance_until_explicitly_replaced() -> None:
    state = SystemState(impact=10.0)

    state = merge(state, _update(SensorField.ENERGY, 85.0, 1))
    assert state.impact == 11.0
    assert state.maintenance == MAINTENANCE_REQUIRED

    state = merge(state, _update(SensorField.ENERGY, 20.0, 2))
    assert state.impact == 11.0
    assert state.maintenance == MAINTENANCE_REQUIRED

    state = merge(state, _update(SensorField.IMPACT, 2.0, 3))
    assert state.maintenance == MAINTENANCE_REQUIRED

    state = merge(state, _update(SensorField.MAINTENANCE, MAINTENANCE_OPERATIONAL, 4))
    assert state.maintenance == MAINTENANCE_OPERATIONAL


def test_maintenance_is_reasserted_while_impact_stays_high() -> None:
    state = SystemState(impact=12.0, maintenance=MAINTENANCE_REQUIRED)

    state = merge(state, _update(SensorField.MAINTENANCE, MAINTENANCE_OPERATIONAL, 1))

    assert state.maintenance == MAINTENANCE_REQUIRED


def test_text_in_numeric_fields_never_raises() -> None:
    state = SystemState()
    state = merge(state, _update(SensorField.IMPACT, "calibrating", 1))
    state = merge(state, _update(SensorField.ENERGY, 99.0, 2))
    state = merge(state, _update(SensorField.VOLTAGE, "offline", 3))

    assert state.impact == "calibrating"
    assert state.energy == 99.0
    assert state.microgrid == MICROGRID_STABLE
    assert state.impact_history[-1].impact == "calibrating"


@pytest.mark.parametrize("seed", [1, 7, 2024])
def test_simulated_streams_keep_history_invariants(seed: int) -> None:
    rng = random.Random(seed)
    state = SystemState()
    tick = 0
    for _cycle in range(15):
        for topic, payload in readings_to_messages(simulate_readings(rng)):
            tick += 1
            state = merge(state, decode(topic, payload, received_at=_at(tick)))

            assert len(state.energy_history) <= 20
            assert len(state.impact_history) <= 20
            times = [p.time for p in state.energy_history]
            assert times == sorted(times)

    assert len(state.energy_history) == 20
    assert state.energy_history[-1].time == _at(tick)


def test_payload_uses_dashboard_keys() -> None:
    state = merge(SystemState(), _update(SensorField.ENERGY, 42.0, 1))

    payload = state.to_payload()

    assert payload["energy"] == 42.0
    assert payload["microgrid"] == MICROGRID_STABLE
    assert payload["energyHistory"] == [{"time": "2026-01-01T00:00:01Z", "energy": 42.0}]
    assert payload["impactHistory"][0]["impact"] == 0.0
