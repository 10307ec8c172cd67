from __future__ import annotations

"""
Typing helpers for redis.asyncio usage.

redis-py annotates its commands with a sync/async union, so awaiting a command
result confuses static checkers. ensure_awaitable narrows the result to the
awaitable the asyncio client actually returns.
"""


from typing import TYPE_CHECKING, Awaitable, TypeVar, cast

from redis import asyncio as redis_asyncio

if TYPE_CHECKING:
    from redis.asyncio import Redis as RedisClient
else:  # pragma: no cover - runtime alias for typing-only import
    RedisClient = redis_asyncio.Redis

T = TypeVar("T")


def ensure_awaitable(result: "Awaitable[T] | T") -> Awaitable[T]:
    """Treat a redis.asyncio command result as the awaitable it is at runtime."""

    return cast(Awaitable[T], result)


__all__ = ["RedisClient", "ensure_awaitable"]
