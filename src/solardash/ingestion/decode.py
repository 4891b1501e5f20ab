"""Sample decoder: ``(channel, payload)`` → :class:`SensorUpdate`."""

from __future__ import annotations

from datetime import UTC, datetime

from solardash.exceptions import DecodeError
from solardash.ingestion.normalize import channel_suffix, parse_payload_value, payload_text
from solardash.models.update import SensorField, SensorUpdate, UpdateSource

_FIELDS_BY_SUFFIX: dict[str, SensorField] = {field.value: field for field in SensorField}


def field_for_channel(topic: str) -> SensorField:
    """Map a channel name (``solar/voltage``) or bare field name to its field."""
    field = _FIELDS_BY_SUFFIX.get(channel_suffix(topic))
    if field is None:
        raise DecodeError(f"Unknown channel {topic!r}", topic=topic)
    return field


def decode(
    topic: str,
    payload: bytes | bytearray | str,
    *,
    received_at: datetime | None = None,
    source: UpdateSource = UpdateSource.LIVE,
) -> SensorUpdate:
    """Decode one inbound message.

    Raises
    ------
    DecodeError
        The channel does not name one of the tracked fields.
    """
    field = field_for_channel(topic)
    value = parse_payload_value(payload_text(payload))
    return SensorUpdate(
        field=field,
        value=value,
        received_at=received_at or datetime.now(UTC),
        source=source,
    )
