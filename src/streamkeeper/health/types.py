"""Health check result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class HealthStatus(Enum):
    """Status reported by a single check or by the service as a whole."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of one health check, built fresh for every query."""

    status: HealthStatus
    timestamp: datetime = field(default_factory=utc_now)
    latency_ms: Optional[float] = None
    error: Optional[str] = None
    timed_out: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY

    @classmethod
    def healthy_result(cls, *, latency_ms: Optional[float] = None, **details: Any) -> "HealthCheckResult":
        return cls(status=HealthStatus.HEALTHY, latency_ms=latency_ms, details=dict(details))

    @classmethod
    def unhealthy_result(cls, error: Optional[str], *, timed_out: bool = False, **details: Any) -> "HealthCheckResult":
        return cls(status=HealthStatus.UNHEALTHY, error=error, timed_out=timed_out, details=dict(details))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.latency_ms is not None:
            payload["latency"] = round(self.latency_ms, 3)
        if self.error is not None:
            payload["error"] = self.error
        if self.timed_out:
            payload["timeout"] = True
        payload.update(self.details)
        return payload


__all__ = ["HealthCheckResult", "HealthStatus", "utc_now"]
