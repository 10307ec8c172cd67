"""Decode raw XREADGROUP / XAUTOCLAIM responses into typed tuples."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

StreamEntry = Tuple[str, Dict[str, str]]


def decode_stream_response(result: Any) -> List[StreamEntry]:
    """Convert an XREADGROUP response to a list of (entry_id, fields) tuples.

    XREADGROUP returns:
        [[stream_name, [(entry_id, {field: value}), ...]], ...]

    Entry ids and field keys/values may be bytes or str depending on the
    client's decode_responses setting. Entries deleted while pending come back
    with ``None`` fields and are decoded with an empty mapping.
    """
    if not result:
        return []

    entries: List[StreamEntry] = []
    for _stream_name, stream_entries in result:
        for entry_id, fields in stream_entries:
            entries.append((to_str(entry_id), decode_fields(fields)))
    return entries


def decode_fields(fields: Any) -> Dict[str, str]:
    """Decode bytes keys/values of one stream entry to strings."""
    if not isinstance(fields, dict):
        return {}
    return {to_str(key): to_str(value) for key, value in fields.items()}


def to_str(value: Any) -> str:
    """Convert bytes to str, pass through str values."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


__all__ = ["StreamEntry", "decode_fields", "decode_stream_response", "to_str"]
