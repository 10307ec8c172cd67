"""
Redis protocol package
"""

from .error_types import REDIS_ERRORS
from .retry import RedisRetryError, RedisRetryPolicy, execute_with_retry, with_redis_retry
from .typing import RedisClient, ensure_awaitable

__all__ = [
    "REDIS_ERRORS",
    "RedisClient",
    "RedisRetryError",
    "RedisRetryPolicy",
    "ensure_awaitable",
    "execute_with_retry",
    "with_redis_retry",
]
