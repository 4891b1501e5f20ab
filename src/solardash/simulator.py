"""Synthetic sensor readings, as published by the field Raspberry Pi.

Used by ``scripts/sensor_simulator.py`` to feed a broker and by the tests
to build realistic update sequences.  Ranges are what the hardware
publisher produced; the dashboard does not enforce them.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from solardash._constants import DEFAULT_TOPIC_PREFIX, EMERGENCY_SAFE, SMOKE_LIMIT, VOLTAGE_LIMIT

VOLTAGE_RANGE = (220.0, 260.0)
SMOKE_RANGE = (0.0, 10.0)
ENERGY_RANGE = (0.0, 100.0)
IMPACT_RANGE = (0.0, 10.0)

#: Emergency text the hardware publisher sends; differs from the dashboard's own alert text.
PUBLISHER_CRITICAL = "Critical Alert: Voltage/Smoke High"


@dataclass(frozen=True, slots=True)
class SensorReadings:
    voltage: float
    smoke: float
    energy: float
    impact: float

    @property
    def emergency(self) -> str:
        if self.voltage > VOLTAGE_LIMIT or self.smoke > SMOKE_LIMIT:
            return PUBLISHER_CRITICAL
        return EMERGENCY_SAFE


def simulate_readings(rng: random.Random | None = None) -> SensorReadings:
    rng = rng or random.Random()
    return SensorReadings(
        voltage=rng.uniform(*VOLTAGE_RANGE),
        smoke=rng.uniform(*SMOKE_RANGE),
        energy=rng.uniform(*ENERGY_RANGE),
        impact=rng.uniform(*IMPACT_RANGE),
    )


def readings_to_messages(readings: SensorReadings, *, prefix: str = DEFAULT_TOPIC_PREFIX) -> list[tuple[str, str]]:
    """``(channel, payload)`` pairs in publish order for one reading cycle."""
    prefix = prefix.strip("/")
    return [
        (f"{prefix}/voltage", str(readings.voltage)),
        (f"{prefix}/smoke", str(readings.smoke)),
        (f"{prefix}/energy", str(readings.energy)),
        (f"{prefix}/impact", str(readings.impact)),
        (f"{prefix}/emergency", readings.emergency),
    ]
