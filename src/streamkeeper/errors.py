"""Error types raised across the service."""

from __future__ import annotations

from typing import Optional

from .config.errors import ConfigurationError


class StreamkeeperError(Exception):
    """Base class for service errors outside configuration."""


class ConnectionRetryableError(StreamkeeperError):
    """A single connection attempt failed and may be retried."""

    def __init__(self, attempt: int, cause: BaseException) -> None:
        super().__init__(f"Connection attempt {attempt} failed: {cause}")
        self.attempt = attempt
        self.cause = cause


class ConnectionExhaustedError(StreamkeeperError):
    """Every allowed connection attempt failed."""

    def __init__(self, attempts: int, last_error: Optional[str]) -> None:
        super().__init__(f"Failed to connect to Redis after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class HealthCheckTimeoutError(StreamkeeperError):
    """A health check did not complete within its budget."""

    def __init__(self, check_name: str, timeout_seconds: float) -> None:
        super().__init__(f"Health check {check_name!r} timed out after {timeout_seconds:.3f}s")
        self.check_name = check_name
        self.timeout_seconds = timeout_seconds


class ValidationError(StreamkeeperError):
    """An inbound stream message failed validation."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class HandlerError(StreamkeeperError):
    """The business handler failed while processing a valid message."""

    def __init__(self, stream_id: str, event: str, aggregate_id: str, cause: BaseException) -> None:
        super().__init__(f"Handler failed for {event} ({aggregate_id}) at {stream_id}: {cause}")
        self.stream_id = stream_id
        self.event = event
        self.aggregate_id = aggregate_id
        self.cause = cause


class ShutdownTimeoutError(StreamkeeperError):
    """Graceful shutdown did not finish before the deadline."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Graceful shutdown timeout after {timeout_seconds:g}s, forcing exit")
        self.timeout_seconds = timeout_seconds


__all__ = [
    "ConfigurationError",
    "ConnectionExhaustedError",
    "ConnectionRetryableError",
    "HandlerError",
    "HealthCheckTimeoutError",
    "ShutdownTimeoutError",
    "StreamkeeperError",
    "ValidationError",
]
