"""Redis Streams helpers for persistent message delivery."""

from .constants import (
    PENDING_CLAIM_IDLE_MS,
    READ_BATCH_SIZE,
    READ_BLOCK_MS,
    STREAM_DEFAULT_MAXLEN,
)
from .consumer_group import acknowledge_entry, claim_pending_entries, ensure_consumer_group
from .message_decoder import StreamEntry, decode_stream_response
from .publisher import publish_event, stream_publish

__all__ = [
    "PENDING_CLAIM_IDLE_MS",
    "READ_BATCH_SIZE",
    "READ_BLOCK_MS",
    "STREAM_DEFAULT_MAXLEN",
    "StreamEntry",
    "acknowledge_entry",
    "claim_pending_entries",
    "decode_stream_response",
    "ensure_consumer_group",
    "publish_event",
    "stream_publish",
]
