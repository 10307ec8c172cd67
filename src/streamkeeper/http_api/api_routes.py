"""Operational API endpoints."""

from __future__ import annotations

from aiohttp import web

from ..redis_protocol.error_types import REDIS_ERRORS, SERIALIZATION_ERRORS
from ..redis_protocol.retry import RedisRetryError
from .keys import RATE_LIMITER_KEY, STREAM_NAME_KEY, TEST_EVENT_PUBLISHER_KEY
from .middleware import request_logger
from .responses import json_response

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait before making another request."

_PUBLISH_ERRORS = REDIS_ERRORS + SERIALIZATION_ERRORS + (RedisRetryError,)


def setup_api_routes(app: web.Application) -> None:
    app.router.add_post("/trigger-test-event", trigger_test_event_handler)


async def trigger_test_event_handler(request: web.Request) -> web.Response:
    """POST /trigger-test-event - publish one test event, at most once per window."""
    log = request_logger(request)
    decision = request.app[RATE_LIMITER_KEY].try_acquire()
    if not decision.allowed:
        log.info("Test event trigger rate limited (retry after %ss)", decision.retry_after_seconds)
        return json_response(
            {"success": False, "error": RATE_LIMIT_MESSAGE, "retryAfter": decision.retry_after_seconds},
            status=429,
        )

    log.info("Manual test event triggered")
    try:
        entry_id = await request.app[TEST_EVENT_PUBLISHER_KEY]()
    except _PUBLISH_ERRORS as exc:
        log.error("Failed to publish manual test event: %s", exc)
        return json_response({"success": False, "error": str(exc)}, status=500)

    log.debug("Manual test event stored as %s", entry_id)
    return json_response(
        {"success": True, "message": "Test event published", "stream": request.app[STREAM_NAME_KEY]},
    )


__all__ = ["RATE_LIMIT_MESSAGE", "setup_api_routes"]
