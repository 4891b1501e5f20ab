"""Subscription gateways.

Live (MQTT) and replay sources behind one ``subscribe(on_update)``
interface.
"""

from solardash.gateway.base import ConnectionStatus, Gateway, Subscription
from solardash.gateway.dataset import fetch_dataset, load_dataset_file, parse_dataset
from solardash.gateway.factory import build_gateway
from solardash.gateway.live import MqttGateway, MqttSubscription
from solardash.gateway.replay import ReplayGateway, ReplaySubscription

__all__ = [
    "ConnectionStatus",
    "Gateway",
    "MqttGateway",
    "MqttSubscription",
    "ReplayGateway",
    "ReplaySubscription",
    "Subscription",
    "build_gateway",
    "fetch_dataset",
    "load_dataset_file",
    "parse_dataset",
]
