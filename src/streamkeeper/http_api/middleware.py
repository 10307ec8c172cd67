"""
HTTP middleware.

Every request gets a correlation id, taken from the X-Correlation-ID header or
generated, echoed on the response and attached to a request-scoped logger.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Awaitable, Callable

from aiohttp import web

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
CORRELATION_ID_KEY = "correlation_id"
REQUEST_LOGGER_KEY = "logger"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def request_logger(request: web.Request) -> logging.LoggerAdapter:
    """Return the logger bound to this request's correlation id."""
    return request.get(REQUEST_LOGGER_KEY) or logging.LoggerAdapter(logger, {})


@web.middleware
async def correlation_id_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    correlation_id = request.headers.get(CORRELATION_ID_HEADER) or str(uuid.uuid4())
    scoped_logger = logging.LoggerAdapter(logger, {"correlation_id": correlation_id})
    request[CORRELATION_ID_KEY] = correlation_id
    request[REQUEST_LOGGER_KEY] = scoped_logger

    started = time.perf_counter()
    scoped_logger.debug("Request started: %s %s", request.method, request.path)
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers[CORRELATION_ID_HEADER] = correlation_id
        scoped_logger.debug("Request ended with HTTP %s: %s %s", exc.status, request.method, request.path)
        raise

    response.headers[CORRELATION_ID_HEADER] = correlation_id
    scoped_logger.debug(
        "Request completed: %s %s -> %s in %.1fms",
        request.method,
        request.path,
        response.status,
        (time.perf_counter() - started) * 1000.0,
    )
    return response


__all__ = [
    "CORRELATION_ID_HEADER",
    "CORRELATION_ID_KEY",
    "correlation_id_middleware",
    "request_logger",
]
