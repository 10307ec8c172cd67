"""
Composite service health.

Every registered check runs concurrently under its own timeout. A check that
times out or raises is reported as unhealthy; it never fails the aggregation
or delays the other checks beyond their own budgets.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ..errors import HealthCheckTimeoutError
from .checks import HealthCheck
from .types import HealthCheckResult, HealthStatus, utc_now

logger = logging.getLogger(__name__)

DEFAULT_CHECK_TIMEOUT_SECONDS = 3.0


def overall_status(results: Dict[str, HealthCheckResult]) -> HealthStatus:
    """Unhealthy beats degraded beats healthy."""
    statuses = [result.status for result in results.values()]
    if any(status is HealthStatus.UNHEALTHY for status in statuses):
        return HealthStatus.UNHEALTHY
    if all(status is HealthStatus.HEALTHY for status in statuses):
        return HealthStatus.HEALTHY
    return HealthStatus.DEGRADED


class HealthAggregator:
    """Runs the registered checks and composes liveness, readiness and detail reports."""

    def __init__(
        self,
        *,
        service_name: str,
        version: str,
        timeout_seconds: float = DEFAULT_CHECK_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.service_name = service_name
        self.version = version
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._started_at = clock()
        self._checks: Dict[str, HealthCheck] = {}

    def register_check(self, name: str, check: HealthCheck) -> None:
        self._checks[name] = check

    @property
    def check_names(self) -> List[str]:
        return list(self._checks)

    def uptime_seconds(self) -> int:
        return int(self._clock() - self._started_at)

    def check_liveness(self) -> Dict[str, Any]:
        return {"status": "OK", "timestamp": utc_now().isoformat()}

    async def _run_check(self, name: str, check: HealthCheck) -> HealthCheckResult:
        try:
            return await asyncio.wait_for(check(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            error = HealthCheckTimeoutError(name, self.timeout_seconds)
            logger.error("%s", error)
            return HealthCheckResult.unhealthy_result(str(error), timed_out=True)

    @staticmethod
    def _ensure_result(name: str, result: Any) -> HealthCheckResult:
        if isinstance(result, HealthCheckResult):
            return result
        logger.error("Health check %s failed: %s", name, result)
        return HealthCheckResult.unhealthy_result(str(result) or type(result).__name__)

    async def perform_checks(self) -> Dict[str, HealthCheckResult]:
        names = list(self._checks)
        outcomes = await asyncio.gather(
            *(self._run_check(name, self._checks[name]) for name in names),
            return_exceptions=True,
        )
        return {name: self._ensure_result(name, outcome) for name, outcome in zip(names, outcomes)}

    async def check_readiness(self) -> Dict[str, Any]:
        """Ready only when every check reports healthy."""
        results = await self.perform_checks()
        unhealthy = [name for name, result in results.items() if not result.healthy]
        timestamp = utc_now().isoformat()
        if not unhealthy:
            return {"status": "ready", "timestamp": timestamp}

        reason = f"Dependencies unhealthy: {', '.join(unhealthy)}"
        logger.warning("Readiness check failed: %s", reason)
        return {"status": "not_ready", "reason": reason, "timestamp": timestamp}

    async def get_detailed_health(self, results: Optional[Dict[str, HealthCheckResult]] = None) -> Dict[str, Any]:
        if results is None:
            results = await self.perform_checks()
        return {
            "status": overall_status(results).value,
            "timestamp": utc_now().isoformat(),
            "service": {
                "name": self.service_name,
                "version": self.version,
                "uptime": self.uptime_seconds(),
            },
            "checks": {name: result.to_dict() for name, result in results.items()},
        }


__all__ = ["DEFAULT_CHECK_TIMEOUT_SECONDS", "HealthAggregator", "overall_status"]
