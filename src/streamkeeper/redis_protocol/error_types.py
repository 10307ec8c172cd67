"""
Exception groupings for Redis-facing code.
"""

import asyncio
from typing import Tuple, Type

from redis.exceptions import RedisError

ExceptionTuple = Tuple[Type[BaseException], ...]

# redis-py errors plus the timeout/socket failures a dropped link surfaces as.
REDIS_ERRORS: ExceptionTuple = (RedisError, asyncio.TimeoutError, OSError, RuntimeError)

# Payload encoding failures (orjson raises a TypeError subclass).
SERIALIZATION_ERRORS: ExceptionTuple = (TypeError, ValueError)
