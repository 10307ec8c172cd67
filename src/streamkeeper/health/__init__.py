"""Service health reporting."""

from .aggregator import HealthAggregator, overall_status
from .checks import HealthCheck, event_stream_check
from .types import HealthCheckResult, HealthStatus

__all__ = [
    "HealthAggregator",
    "HealthCheck",
    "HealthCheckResult",
    "HealthStatus",
    "event_stream_check",
    "overall_status",
]
