from __future__ import annotations

"""
Retry/backoff utilities for Redis stream commands.

Commands that are safe to repeat (group creation, acknowledgements, pending
entry claims) run through ``with_redis_retry`` so that a brief network blip
does not surface as a failure. Delays grow exponentially with jitter.
"""


import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from redis.exceptions import ResponseError

from .error_types import REDIS_ERRORS

_ResultT = TypeVar("_ResultT")

DEFAULT_REDIS_RETRY_MAX_DELAY = 2.0
DEFAULT_REDIS_RETRY_MAX_ATTEMPTS = 3
MIN_RETRY_SLEEP_SECONDS = 0.05

_MODULE_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedisRetryPolicy:
    """Policy controlling retry/backoff behaviour."""

    max_attempts: int = DEFAULT_REDIS_RETRY_MAX_ATTEMPTS
    initial_delay: float = 0.2
    max_delay: float = DEFAULT_REDIS_RETRY_MAX_DELAY
    multiplier: float = 2.0
    jitter_ratio: float = 0.15
    retry_exceptions: Tuple[Type[BaseException], ...] = REDIS_ERRORS
    # Server replies such as BUSYGROUP or WRONGTYPE will not change on retry.
    fatal_exceptions: Tuple[Type[BaseException], ...] = (ResponseError,)


@dataclass(frozen=True)
class RedisRetryContext:
    """Metadata supplied to retry callbacks."""

    attempt: int
    max_attempts: int
    delay: float
    exception: BaseException


class RedisRetryError(RuntimeError):
    """Raised when a retryable Redis operation exhausts all attempts."""


RetryCallback = Callable[[RedisRetryContext], Optional[Awaitable[None]]]
_SECURE_RANDOM = random.SystemRandom()
_sleep = asyncio.sleep

DEFAULT_POLICY = RedisRetryPolicy()


def _next_sleep(delay: float, policy: RedisRetryPolicy) -> float:
    sleep_for = min(delay, policy.max_delay)
    jitter = sleep_for * policy.jitter_ratio
    if jitter > 0:
        sleep_for += _SECURE_RANDOM.uniform(-jitter, jitter)
    return max(MIN_RETRY_SLEEP_SECONDS, sleep_for)


async def execute_with_retry(
    operation: Callable[[int], Awaitable[_ResultT]],
    *,
    policy: RedisRetryPolicy,
    logger: logging.Logger,
    context: str,
    on_retry: Optional[RetryCallback] = None,
) -> _ResultT:
    """
    Execute ``operation`` with a shared retry/backoff policy.

    Args:
        operation: Callable invoked for each attempt; receives the 1-based attempt index.
        policy: Retry timing configuration.
        logger: Logger used for default retry messages.
        context: Label describing the operation (used in logs).
        on_retry: Optional coroutine/callable invoked before each retry with details.

    Returns:
        The value returned by ``operation``.

    Raises:
        RedisRetryError: When the operation exhausts all retry attempts.
    """

    delay = policy.initial_delay
    max_attempts = max(1, policy.max_attempts)

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation(attempt)
        except policy.fatal_exceptions:
            raise
        except policy.retry_exceptions as exc:
            if attempt >= max_attempts:
                raise RedisRetryError(f"{context} failed after {attempt} attempt(s)") from exc

            sleep_for = _next_sleep(delay, policy)
            retry_context = RedisRetryContext(
                attempt=attempt,
                max_attempts=max_attempts,
                delay=sleep_for,
                exception=exc,
            )

            if on_retry is not None:
                await _maybe_await(on_retry(retry_context))
            else:
                logger.warning(
                    "%s failed on attempt %s/%s; retrying in %.2fs (%s)",
                    context,
                    attempt,
                    max_attempts,
                    sleep_for,
                    exc,
                )

            await _sleep(sleep_for)
            delay *= policy.multiplier

    raise RedisRetryError(f"{context} failed: unexpected retry loop exit")


async def with_redis_retry(
    operation: Callable[[], Awaitable[_ResultT]],
    *,
    context: str,
    policy: Optional[RedisRetryPolicy] = None,
    logger: Optional[logging.Logger] = None,
) -> _ResultT:
    """Run a zero-argument Redis command factory under the default retry policy."""

    async def _attempt(_attempt: int) -> _ResultT:
        return await operation()

    return await execute_with_retry(
        _attempt,
        policy=policy or DEFAULT_POLICY,
        logger=logger or _MODULE_LOGGER,
        context=context,
    )


async def _maybe_await(result: Optional[Awaitable[None]]) -> None:
    if result is None:
        return
    await result


__all__ = [
    "DEFAULT_POLICY",
    "RedisRetryContext",
    "RedisRetryError",
    "RedisRetryPolicy",
    "execute_with_retry",
    "with_redis_retry",
]
