"""Ingestion layer.

Adapters that turn raw channel messages and replay records into
:class:`solardash.models.SensorUpdate` values.
"""

from solardash.ingestion.decode import decode, field_for_channel

__all__ = ["decode", "field_for_channel"]
