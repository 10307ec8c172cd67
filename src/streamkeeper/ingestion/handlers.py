"""Default business handler."""

from __future__ import annotations

import logging

from .message import StreamEvent

logger = logging.getLogger(__name__)


def log_event_handler(event: StreamEvent) -> None:
    logger.info(
        "Event %s received for aggregate %s",
        event.event,
        event.aggregate_id,
        extra={"stream_id": event.stream_id, "event": event.event, "aggregate_id": event.aggregate_id},
    )


__all__ = ["log_event_handler"]
