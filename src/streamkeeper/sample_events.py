"""Synthetic events used to exercise the stream end to end."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Awaitable, Callable

from .redis_protocol.streams import publish_event
from .redis_protocol.typing import RedisClient

TEST_EVENT_NAME = "test_starters"
TEST_AGGREGATE_ID = "abc123"


def make_test_event_publisher(redis_client: RedisClient, stream: str, service_name: str) -> Callable[[], Awaitable[str]]:
    """Return a zero-argument coroutine function that publishes one test event."""

    async def _publish() -> str:
        return await publish_event(
            redis_client,
            stream,
            TEST_EVENT_NAME,
            TEST_AGGREGATE_ID,
            {
                "message": f"Message from {service_name}",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            service_name=service_name,
        )

    return _publish


__all__ = ["TEST_AGGREGATE_ID", "TEST_EVENT_NAME", "make_test_event_publisher"]
