"""
Inbound message processing: validate, hand to the business handler, ack.

``on_message`` never raises into the consumer loop. Every outcome, including
rejection and handler failure, is reported as an ``IngestionOutcome``.
"""

from __future__ import annotations

import inspect
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from ..errors import HandlerError
from ..health.types import utc_now
from ..process_status import ProcessStatusRegistry
from .message import StreamEvent
from .validators import ValidatedMessage, ValidationFailure, validate_message

logger = logging.getLogger(__name__)

EventHandler = Callable[[StreamEvent], Union[Awaitable[None], None]]


class IngestionOutcome(Enum):
    ACKED = "acked"
    REJECTED = "rejected"
    HANDLER_FAILED = "handler_failed"
    ACK_FAILED = "ack_failed"


class EventIngestionPipeline:
    """Processes one inbound message at a time on behalf of the stream consumer."""

    def __init__(
        self,
        handler: EventHandler,
        registry: ProcessStatusRegistry,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._handler = handler
        self._registry = registry
        self._clock = clock

    async def on_message(self, raw: Any) -> IngestionOutcome:
        result = validate_message(raw)
        if isinstance(result, ValidationFailure):
            logger.warning(
                "Rejected invalid stream message: %s %s",
                result.field,
                result.reason,
                extra={"field": result.field, "reason": result.reason},
            )
            return IngestionOutcome.REJECTED

        event = StreamEvent(
            stream_id=result.stream_id,
            event=result.event,
            aggregate_id=result.aggregate_id,
            data=result.data,
            headers=result.headers,
            received_at=self._clock(),
        )
        self._registry.record_message(event.received_at)

        handler_error = await self._invoke_handler(event)
        if not await self._acknowledge(result):
            return IngestionOutcome.ACK_FAILED
        if handler_error is not None:
            return IngestionOutcome.HANDLER_FAILED
        return IngestionOutcome.ACKED

    async def _invoke_handler(self, event: StreamEvent) -> Optional[HandlerError]:
        try:
            outcome = self._handler(event)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:  # handler failures are isolated per message
            error = HandlerError(event.stream_id, event.event, event.aggregate_id, exc)
            logger.error(
                "%s",
                error,
                exc_info=True,
                extra={"stream_id": event.stream_id, "event": event.event, "aggregate_id": event.aggregate_id},
            )
            return error
        return None

    async def _acknowledge(self, message: ValidatedMessage) -> bool:
        context = {"stream_id": message.stream_id, "event": message.event, "aggregate_id": message.aggregate_id}
        try:
            acked = message.ack(message.stream_id)
            if inspect.isawaitable(acked):
                acked = await acked
        except Exception as exc:  # ack failures are reported, never raised
            logger.error("Failed to acknowledge %s: %s", message.stream_id, exc, extra=context)
            return False
        if acked is False:
            logger.warning("Acknowledgement for %s was not applied", message.stream_id, extra=context)
            return False
        return True


__all__ = ["EventHandler", "EventIngestionPipeline", "IngestionOutcome"]
