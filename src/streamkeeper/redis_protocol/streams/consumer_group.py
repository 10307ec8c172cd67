"""Consumer group management: idempotent creation and pending entry recovery."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List

from redis.exceptions import ResponseError

from ..retry import with_redis_retry
from ..typing import ensure_awaitable
from .constants import PENDING_CLAIM_IDLE_MS, XAUTOCLAIM_MIN_RESULT_LENGTH
from .message_decoder import StreamEntry, decode_fields, to_str

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


async def ensure_consumer_group(
    redis_client: "Redis",
    stream: str,
    group: str,
    start_id: str = "0",
) -> bool:
    """Create a consumer group idempotently.

    Uses MKSTREAM to create the stream if it doesn't exist and treats the
    BUSYGROUP reply as success, so it is safe to call on every startup.

    Returns:
        True when the group was created, False when it already existed.
    """
    try:
        await with_redis_retry(
            lambda: ensure_awaitable(redis_client.xgroup_create(stream, group, id=start_id, mkstream=True)),
            context=f"xgroup_create:{stream}/{group}",
        )
    except ResponseError as exc:
        if "BUSYGROUP" in str(exc):
            logger.debug("Consumer group %s already exists on %s", group, stream)
            return False
        raise
    logger.info("Created consumer group %s on stream %s", group, stream)
    return True


async def claim_pending_entries(
    redis_client: "Redis",
    stream: str,
    group: str,
    consumer: str,
    idle_ms: int = PENDING_CLAIM_IDLE_MS,
) -> List[StreamEntry]:
    """Claim pending entries that have been idle for too long.

    Uses XAUTOCLAIM to take ownership of entries a previous consumer abandoned
    (for example after a crash), so they are processed again.
    """
    result: Any = await with_redis_retry(
        lambda: ensure_awaitable(redis_client.xautoclaim(stream, group, consumer, min_idle_time=idle_ms, start_id="0-0")),
        context=f"xautoclaim:{stream}/{group}",
    )
    if not result or len(result) < XAUTOCLAIM_MIN_RESULT_LENGTH:
        return []

    claimed: List[StreamEntry] = [(to_str(entry_id), decode_fields(fields)) for entry_id, fields in result[1]]
    if claimed:
        logger.info("Claimed %d pending entries from %s/%s", len(claimed), stream, group)
    return claimed


async def acknowledge_entry(redis_client: "Redis", stream: str, group: str, entry_id: str) -> int:
    """XACK a single entry; returns the number of entries Redis acknowledged."""
    acked: Any = await with_redis_retry(
        lambda: ensure_awaitable(redis_client.xack(stream, group, entry_id)),
        context=f"xack:{stream}/{group}",
    )
    return int(acked or 0)


__all__ = ["acknowledge_entry", "claim_pending_entries", "ensure_consumer_group"]
