"""
Redis link lifecycle: bounded connect with backoff, liveness checks, disconnect.

The manager is the only component that changes the connection state. Every
other part of the service observes it through ``check_connection`` and
``get_status``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from ..connection_state import ConnectionState
from ..errors import ConnectionExhaustedError, ConnectionRetryableError
from ..health.types import HealthCheckResult, utc_now
from ..redis_protocol.error_types import REDIS_ERRORS
from ..redis_protocol.typing import RedisClient, ensure_awaitable
from .retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


class ConnectionLifecycleManager:
    """Owns the Redis client and its connection state."""

    def __init__(
        self,
        redis_client: RedisClient,
        policy: RetryPolicy,
        *,
        connect_timeout_seconds: float,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = redis_client
        self.policy = policy
        self.connect_timeout_seconds = connect_timeout_seconds
        self._sleep = sleep
        self._clock = clock

        self._state = ConnectionState.DISCONNECTED
        self._attempts = 0
        self._last_error: Optional[str] = None
        self._last_check_at: Optional[datetime] = None
        self._last_latency_ms: Optional[float] = None
        self._connect_started_at: Optional[float] = None
        self._connected_at: Optional[float] = None

    @property
    def client(self) -> RedisClient:
        return self._client

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def _transition(self, new_state: ConnectionState) -> None:
        if new_state is not self._state:
            logger.debug("Redis connection state %s -> %s", self._state.value, new_state.value)
            self._state = new_state

    async def _ping(self) -> float:
        """Ping once under the connection timeout; returns latency in milliseconds."""
        started = self._clock()
        await asyncio.wait_for(ensure_awaitable(self._client.ping()), timeout=self.connect_timeout_seconds)
        return (self._clock() - started) * 1000.0

    async def _attempt(self, attempt: int) -> float:
        try:
            return await self._ping()
        except REDIS_ERRORS as exc:
            raise ConnectionRetryableError(attempt, exc) from exc

    async def connect(self) -> bool:
        """
        Connect with bounded retries.

        Returns:
            True once a ping succeeds

        Raises:
            ConnectionExhaustedError: When every attempt allowed by the policy failed
        """
        self._attempts = 0
        self._last_error = None
        self._connect_started_at = self._clock()
        max_attempts = self.policy.max_attempts

        for attempt in range(1, max_attempts + 1):
            self._transition(ConnectionState.CONNECTING)
            logger.info("Connecting to Redis (attempt %s/%s)", attempt, max_attempts)
            try:
                latency_ms = await self._attempt(attempt)
            except ConnectionRetryableError as exc:
                self._attempts += 1
                self._last_error = str(exc.cause) or type(exc.cause).__name__
                logger.warning("Redis connection attempt %s/%s failed: %s", attempt, max_attempts, self._last_error)
                if attempt >= max_attempts:
                    break
                delay = self.policy.delay_for_attempt(attempt)
                logger.info("Retrying Redis connection in %.3fs", delay)
                await self._sleep(delay)
                continue

            self._transition(ConnectionState.CONNECTED)
            self._last_latency_ms = latency_ms
            self._last_check_at = utc_now()
            self._connected_at = self._clock()
            logger.info("Successfully connected to Redis (latency=%.1fms)", latency_ms)
            return True

        self._transition(ConnectionState.FAILED)
        logger.error("Failed to connect to Redis after %s attempts: %s", self._attempts, self._last_error)
        raise ConnectionExhaustedError(self._attempts, self._last_error)

    async def check_connection(self) -> HealthCheckResult:
        """Probe the link once. Never retries and never raises for Redis failures."""
        last_check = self._last_check_at.isoformat() if self._last_check_at else None
        if self._state is not ConnectionState.CONNECTED:
            return HealthCheckResult.unhealthy_result(
                self._last_error or "Not connected",
                attempts=self._attempts,
                lastCheck=last_check,
            )

        try:
            latency_ms = await self._ping()
        except REDIS_ERRORS as exc:
            self._transition(ConnectionState.FAILED)
            self._connected_at = None
            self._last_error = str(exc) or type(exc).__name__
            logger.error("Redis health check failed: %s", self._last_error)
            return HealthCheckResult.unhealthy_result(self._last_error, lastCheck=last_check)

        self._last_latency_ms = latency_ms
        self._last_check_at = utc_now()
        return HealthCheckResult.healthy_result(latency_ms=latency_ms, lastCheck=self._last_check_at.isoformat())

    async def disconnect(self) -> None:
        """Close the client. Close errors are logged, never raised; repeat calls do nothing."""
        if self._state is ConnectionState.DISCONNECTED:
            logger.debug("Redis already disconnected")
            return

        try:
            await ensure_awaitable(self._client.aclose())
        except REDIS_ERRORS as exc:
            logger.warning("Error closing Redis connection: %s", exc)
        else:
            logger.info("Redis connection closed")
        finally:
            self._transition(ConnectionState.DISCONNECTED)
            self._connected_at = None

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of the connection state; performs no I/O."""
        connected_duration = None
        if self._connected_at is not None and self._state is ConnectionState.CONNECTED:
            connected_duration = self._clock() - self._connected_at
        return {
            "state": self._state.value,
            "connected": self.is_connected,
            "attempts": self._attempts,
            "maxAttempts": self.policy.max_attempts,
            "lastError": self._last_error,
            "lastCheck": self._last_check_at.isoformat() if self._last_check_at else None,
            "latencyMs": self._last_latency_ms,
            "connectedDurationSeconds": connected_duration,
        }


__all__ = ["ConnectionLifecycleManager"]
