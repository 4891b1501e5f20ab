"""solardash - rolling telemetry state for the solar energy dashboard."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("solardash")
except PackageNotFoundError:
    __version__ = "0+local"
from solardash.config import BrokerAddress, DashboardConfig, parse_broker_url
from solardash.exceptions import (
    ConfigError,
    DatasetLoadError,
    DecodeError,
    SolarDashError,
    TransportError,
)
from solardash.gateway import (
    ConnectionStatus,
    MqttGateway,
    ReplayGateway,
    build_gateway,
)
from solardash.ingestion import decode
from solardash.models import (
    EnergyPoint,
    ImpactPoint,
    ReplayRecord,
    SensorField,
    SensorUpdate,
    SystemState,
    UpdateSource,
)
from solardash.session import DashboardSession
from solardash.state import EnergyInsights, StateCell, energy_insights, evaluate, merge

__all__ = [
    "__version__",
    "BrokerAddress",
    "ConfigError",
    "ConnectionStatus",
    "DashboardConfig",
    "DashboardSession",
    "DatasetLoadError",
    "DecodeError",
    "EnergyInsights",
    "EnergyPoint",
    "ImpactPoint",
    "MqttGateway",
    "ReplayGateway",
    "ReplayRecord",
    "SensorField",
    "SensorUpdate",
    "SolarDashError",
    "StateCell",
    "SystemState",
    "TransportError",
    "UpdateSource",
    "build_gateway",
    "decode",
    "energy_insights",
    "evaluate",
    "merge",
    "parse_broker_url",
]
