"""Internal constants shared across the library."""

DEFAULT_BROKER_URL = "ws://raspberrypi.local:9001"
DEFAULT_TOPIC_PREFIX = "solar"
DEFAULT_REPLAY_URL = "http://localhost:5000/api/energy-data"

#: Rolling window size for the energy/impact histories.
HISTORY_LIMIT = 20

#: Seconds between two replayed dataset records.
REPLAY_INTERVAL = 1.0

#: Replayed impact is derived from energy by this factor.
REPLAY_IMPACT_FACTOR = 0.1

# ------------------------------------------------------------------
# Thresholds
# ------------------------------------------------------------------

VOLTAGE_LIMIT = 250.0
SMOKE_LIMIT = 5.0
ENERGY_IMPACT_THRESHOLD = 80.0
IMPACT_MAINTENANCE_THRESHOLD = 10.0

# ------------------------------------------------------------------
# Status strings (also the defaults of a fresh state)
# ------------------------------------------------------------------

MAINTENANCE_OPERATIONAL = "Operational"
MAINTENANCE_REQUIRED = "Immediate Maintenance Required"

MICROGRID_STABLE = "Stable"
MICROGRID_SHUTTING_DOWN = "Shutting Down to Prevent Damage"

EMERGENCY_SAFE = "Safe"
EMERGENCY_CRITICAL = "Critical Alert: Voltage/Smoke Level Exceeded!"

# ------------------------------------------------------------------
# Energy insight thresholds (window averages / latest sample)
# ------------------------------------------------------------------

INSIGHT_LOW_AVERAGE = 20.0
INSIGHT_HIGH_AVERAGE = 80.0
INSIGHT_SURGE_LEVEL = 95.0
