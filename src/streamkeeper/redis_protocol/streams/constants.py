"""Redis Streams constants."""

# Stream trimming: approximate maxlen keeps the stream bounded
STREAM_DEFAULT_MAXLEN = 10_000

# Pending entry recovery: claim entries idle longer than this
PENDING_CLAIM_IDLE_MS = 60_000

# XREADGROUP batching
READ_BATCH_SIZE = 10
READ_BLOCK_MS = 5_000

# XAUTOCLAIM returns (next_start_id, entries, deleted_ids); need at least 2 elements
XAUTOCLAIM_MIN_RESULT_LENGTH = 2

__all__ = [
    "PENDING_CLAIM_IDLE_MS",
    "READ_BATCH_SIZE",
    "READ_BLOCK_MS",
    "STREAM_DEFAULT_MAXLEN",
    "XAUTOCLAIM_MIN_RESULT_LENGTH",
]
