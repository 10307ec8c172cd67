"""Inbound event ingestion."""

from .ack import AckHandle
from .consumer import StreamConsumer
from .handlers import log_event_handler
from .message import InboundMessage, StreamEvent, build_inbound_message
from .pipeline import EventHandler, EventIngestionPipeline, IngestionOutcome
from .validators import ValidatedMessage, ValidationFailure, validate_message

__all__ = [
    "AckHandle",
    "EventHandler",
    "EventIngestionPipeline",
    "InboundMessage",
    "IngestionOutcome",
    "StreamConsumer",
    "StreamEvent",
    "ValidatedMessage",
    "ValidationFailure",
    "build_inbound_message",
    "log_event_handler",
    "validate_message",
]
