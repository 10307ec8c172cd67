from __future__ import annotations

"""
Async Redis client construction.

The connection lifecycle manager owns retries, so clients built here disable
redis-py's own reconnect loop; a failed command surfaces immediately.
"""


import logging

import redis.asyncio
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from .config.settings import RedisSettings

logger = logging.getLogger(__name__)


def create_redis_client(settings: RedisSettings) -> redis.asyncio.Redis:
    """Build an unconnected async client; the first command opens the socket."""
    timeout_seconds = settings.connection.timeout_ms / 1000.0
    client = redis.asyncio.Redis(
        host=settings.host,
        port=settings.port,
        username=settings.user,
        password=settings.password,
        ssl=settings.tls_enabled,
        socket_connect_timeout=timeout_seconds,
        socket_timeout=timeout_seconds,
        decode_responses=True,
        encoding_errors="replace",
        retry=Retry(NoBackoff(), 0),
    )
    logger.debug(
        "Created Redis client for %s:%s (tls=%s, auth=%s)",
        settings.host,
        settings.port,
        settings.tls_enabled,
        "enabled" if settings.user else "disabled",
    )
    return client


__all__ = ["create_redis_client"]
