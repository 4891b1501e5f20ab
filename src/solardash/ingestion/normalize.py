"""Normalization helpers.

Centralizes payload coercion and the numeric reading checks shared by
the decoder, the aggregator and the rule engine.
"""

from __future__ import annotations

import math
from typing import Any


def parse_payload_value(text: str) -> float | str:
    """Return *text* as a float when it is a finite decimal number, else unchanged.

    ``float()`` also accepts ``"nan"``, ``"inf"`` and underscore digit
    groups; none of those are sensor readings, so they stay strings.
    """
    candidate = text.strip()
    if not candidate or "_" in candidate:
        return candidate
    try:
        parsed = float(candidate)
    except ValueError:
        return candidate
    if not math.isfinite(parsed):
        return candidate
    return parsed


def as_number(value: Any) -> float | None:
    """Numeric view of a reading; ``None`` for status strings and other junk."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def exceeds(value: Any, limit: float) -> bool:
    """``value > limit`` for numeric readings; never true for text."""
    number = as_number(value)
    return number is not None and number > limit


def within(value: Any, limit: float) -> bool:
    """``value <= limit`` for numeric readings; never true for text."""
    number = as_number(value)
    return number is not None and number <= limit


def channel_suffix(topic: str) -> str:
    """Last path segment of a channel name, lower-cased."""
    return topic.strip().rstrip("/").rsplit("/", 1)[-1].strip().lower()


def payload_text(payload: bytes | bytearray | str) -> str:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode("utf-8", errors="replace").strip()
    return payload.strip()
