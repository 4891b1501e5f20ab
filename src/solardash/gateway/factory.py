"""Pick and prepare the gateway named by a :class:`DashboardConfig`."""

from __future__ import annotations

import logging

import aiohttp

from solardash.config import DashboardConfig
from solardash.gateway.base import Gateway
from solardash.gateway.dataset import fetch_dataset, load_dataset_file
from solardash.gateway.live import MqttGateway
from solardash.gateway.replay import ReplayGateway

_logger = logging.getLogger(__name__)


async def build_gateway(
    config: DashboardConfig,
    *,
    http_session: aiohttp.ClientSession | None = None,
) -> Gateway:
    """Return a live or replay gateway.

    Replay datasets are loaded here, once; a
    :class:`~solardash.exceptions.DatasetLoadError` means replay never starts.
    """
    if config.mode == "live":
        _logger.debug("Using live gateway on %s", config.broker.display)
        return MqttGateway.from_config(config)

    if config.replay_path:
        records = load_dataset_file(config.replay_path)
    else:
        records = await fetch_dataset(config.replay_url, http_session=http_session)
    _logger.debug("Using replay gateway with %d records every %.2fs", len(records), config.replay_interval)
    return ReplayGateway(records, interval=config.replay_interval)
