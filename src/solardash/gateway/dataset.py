"""Replay dataset loading.

The only accepted shape is a JSON array of ``{"energy": <number>, ...}``
objects.  Every failure (network, HTTP status, JSON, shape) surfaces as
:class:`~solardash.exceptions.DatasetLoadError`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import aiohttp
from pydantic import TypeAdapter, ValidationError

from solardash.exceptions import DatasetLoadError
from solardash.models.replay import ReplayRecord

_logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[ReplayRecord])

_FETCH_TIMEOUT = aiohttp.ClientTimeout(total=10)


def parse_dataset(raw: Any, *, source: str = "") -> tuple[ReplayRecord, ...]:
    """Validate decoded JSON into replay records."""
    if not isinstance(raw, list):
        raise DatasetLoadError(
            f"Replay dataset from {source or '<memory>'} must be a JSON array, got {type(raw).__name__}",
            source=source,
        )
    try:
        records = _RECORDS.validate_python(raw)
    except ValidationError as exc:
        raise DatasetLoadError(
            f"Replay dataset from {source or '<memory>'} has invalid records: {exc.error_count()} error(s)",
            source=source,
        ) from exc
    return tuple(records)


def _parse_text(text: str, *, source: str) -> tuple[ReplayRecord, ...]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DatasetLoadError(f"Replay dataset from {source} is not JSON: {text[:64]!r}", source=source) from exc
    return parse_dataset(raw, source=source)


def load_dataset_file(path: str | Path) -> tuple[ReplayRecord, ...]:
    """Load a dataset from a local JSON file."""
    source = str(path)
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DatasetLoadError(f"Cannot read replay dataset {source}: {exc}", source=source) from exc
    records = _parse_text(text, source=source)
    _logger.debug("Loaded %d replay records from %s", len(records), source)
    return records


async def fetch_dataset(url: str, *, http_session: aiohttp.ClientSession | None = None) -> tuple[ReplayRecord, ...]:
    """GET a dataset from the file server collaborator."""
    own_session = http_session is None
    session = http_session or aiohttp.ClientSession(timeout=_FETCH_TIMEOUT)
    _logger.debug("GET %s", url)
    try:
        async with session.get(url) as resp:
            text = await resp.text()
            if resp.status != 200:
                raise DatasetLoadError(f"HTTP {resp.status} from {url}: {text[:200]}", source=url)
    except DatasetLoadError:
        raise
    except (aiohttp.ClientError, TimeoutError) as exc:
        raise DatasetLoadError(f"Request to {url} failed: {exc}", source=url) from exc
    finally:
        if own_session:
            await session.close()

    records = _parse_text(text, source=url)
    _logger.debug("Fetched %d replay records from %s", len(records), url)
    return records
