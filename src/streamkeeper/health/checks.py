"""Health checks registered by the service."""

from __future__ import annotations

from typing import Awaitable, Callable

from ..process_status import ProcessStatusRegistry
from .types import HealthCheckResult, HealthStatus

HealthCheck = Callable[[], Awaitable[HealthCheckResult]]


def event_stream_check(registry: ProcessStatusRegistry) -> HealthCheck:
    """Report the stream consumer as healthy while it is actively reading."""

    async def _check() -> HealthCheckResult:
        active = registry.stream_active
        last_message = registry.last_message_at.isoformat() if registry.last_message_at else None
        return HealthCheckResult(
            status=HealthStatus.HEALTHY if active else HealthStatus.UNHEALTHY,
            error=None if active else "Stream consumer inactive",
            details={"consumerActive": active, "lastMessage": last_message},
        )

    return _check


__all__ = ["HealthCheck", "event_stream_check"]
