"""Inbound message shapes for the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

import orjson

from .ack import AckHandle


@dataclass
class InboundMessage:
    """
    One stream entry as read by the consumer, before validation.

    ``data`` and ``headers`` hold whatever the entry carried after JSON
    decoding; validation decides whether they are acceptable.
    """

    stream_id: Any
    event: Any
    aggregate_id: Any
    ack: AckHandle
    data: Any = None
    headers: Any = None


@dataclass(frozen=True)
class StreamEvent:
    """A validated event as delivered to the business handler."""

    stream_id: str
    event: str
    aggregate_id: str
    data: Dict[str, Any]
    headers: Dict[str, str]
    received_at: datetime


def _decode_json_field(raw: Optional[str]) -> Any:
    if raw is None or raw == "":
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        return raw


def build_inbound_message(entry_id: str, fields: Mapping[str, str], ack: AckHandle) -> InboundMessage:
    """Map the stream field layout (event, aggregateId, data, headers) onto a message."""
    return InboundMessage(
        stream_id=entry_id,
        event=fields.get("event"),
        aggregate_id=fields.get("aggregateId"),
        data=_decode_json_field(fields.get("data")),
        headers=_decode_json_field(fields.get("headers")),
        ack=ack,
    )


__all__ = ["InboundMessage", "StreamEvent", "build_inbound_message"]
