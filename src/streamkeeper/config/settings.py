"""
Service configuration assembled from the environment.

All values are read once at startup by :func:`load_app_config` and validated
before any connection is attempted. Durations that arrive in milliseconds are
kept in milliseconds on the settings objects and converted at the point of use.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from ..logging_config import resolve_level
from .errors import ConfigurationError
from .runtime import env_bool, env_int, env_str

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION_TIMEOUT_MS = 10_000
MIN_RECOMMENDED_CONNECTION_TIMEOUT_MS = 1_000
DEFAULT_MAX_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAYS_MS = "5000,15000,30000"
DEFAULT_SERVICE_PORT = 8000
DEFAULT_STREAM_NAME = "event-stream"
DEFAULT_HEALTH_CHECK_TIMEOUT_MS = 3_000
DEFAULT_SHUTDOWN_TIMEOUT_MS = 30_000

VALID_LOG_FORMATS = ("text", "json")

STREAM_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._:-]+$")
SENSITIVE_KEYS = ("password", "pw", "secret", "key", "token", "auth")
MASKED_VALUE = "***MASKED***"


@dataclass(frozen=True)
class ConnectionSettings:
    """Retry and timeout settings for the Redis link."""

    timeout_ms: int
    max_retries: int
    retry_delays_ms: Tuple[int, ...]


@dataclass(frozen=True)
class RedisSettings:
    host: str
    port: int
    user: Optional[str]
    password: Optional[str]
    tls_enabled: bool
    connection: ConnectionSettings


@dataclass(frozen=True)
class ServiceSettings:
    name: str
    port: int
    host: str
    environment: str
    version: str


@dataclass(frozen=True)
class StreamSettings:
    name: str
    consumer_group: str
    test_event_interval_seconds: int


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    format: str


@dataclass(frozen=True)
class MonitoringSettings:
    metrics_enabled: bool
    tracing_enabled: bool
    health_check_timeout_ms: int
    shutdown_timeout_ms: int


@dataclass(frozen=True)
class AppConfig:
    """Complete, validated service configuration."""

    redis: RedisSettings
    service: ServiceSettings
    stream: StreamSettings
    logging: LoggingSettings
    monitoring: MonitoringSettings
    timezone: str

    def masked(self) -> Dict[str, Any]:
        """Return the configuration as a dict with credentials masked."""
        return mask_sensitive_data(asdict(self))


def mask_sensitive_data(data: Any) -> Any:
    """Recursively replace values whose key looks like a credential."""
    if not isinstance(data, dict):
        return data

    masked: Dict[str, Any] = {}
    for key, value in data.items():
        if any(sensitive in str(key).lower() for sensitive in SENSITIVE_KEYS):
            masked[key] = MASKED_VALUE if value is not None else None
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        else:
            masked[key] = value
    return masked


def parse_retry_delays(raw: str) -> Tuple[int, ...]:
    """Parse a comma separated list of positive millisecond delays."""
    items = [item.strip() for item in raw.split(",") if item.strip()]
    if not items:
        raise ConfigurationError("At least one retry delay must be specified")

    delays = []
    for item in items:
        try:
            delay = int(item)
        except ValueError as exc:
            raise ConfigurationError.invalid_format("RETRY_DELAYS", raw, "comma separated positive integers") from exc
        if delay <= 0:
            raise ConfigurationError.invalid_value("RETRY_DELAYS", raw, "Retry delays must be positive")
        delays.append(delay)
    return tuple(delays)


def _validate_log_format(log_format: str) -> str:
    lower_format = log_format.lower()
    if lower_format not in VALID_LOG_FORMATS:
        logger.warning("Invalid log format: %s, defaulting to text", log_format)
        return "text"
    return lower_format


def _require_port(name: str, value: int) -> int:
    if value < 1 or value > 65535:
        raise ConfigurationError.out_of_range(name, value, 1, 65535)
    return value


def _require_positive(name: str, value: int) -> int:
    if value <= 0:
        raise ConfigurationError.invalid_value(name, value, "Must be greater than zero")
    return value


def validate_stream_name(name: str) -> str:
    if not STREAM_NAME_PATTERN.match(name):
        raise ConfigurationError(
            f'Invalid stream name: "{name}" contains invalid characters. '
            "Only alphanumeric, dots, underscores, hyphens, and colons are allowed."
        )
    return name


def _load_connection_settings() -> ConnectionSettings:
    timeout_ms = env_int("CONNECTION_TIMEOUT", DEFAULT_CONNECTION_TIMEOUT_MS)
    if timeout_ms < MIN_RECOMMENDED_CONNECTION_TIMEOUT_MS:
        logger.warning(
            "Connection timeout is very low (%sms), minimum recommended is %sms",
            timeout_ms,
            MIN_RECOMMENDED_CONNECTION_TIMEOUT_MS,
        )
    _require_positive("CONNECTION_TIMEOUT", timeout_ms)

    max_retries = env_int("MAX_RETRY_ATTEMPTS", DEFAULT_MAX_RETRY_ATTEMPTS)
    if max_retries < 1:
        raise ConfigurationError("Max retry attempts must be at least 1")

    retry_delays = parse_retry_delays(env_str("RETRY_DELAYS", DEFAULT_RETRY_DELAYS_MS))
    return ConnectionSettings(timeout_ms=timeout_ms, max_retries=max_retries, retry_delays_ms=retry_delays)


def load_app_config() -> AppConfig:
    """
    Read and validate every setting the service needs.

    Raises:
        ConfigurationError: When a required value is missing or any value is invalid
    """
    redis_settings = RedisSettings(
        host=env_str("REDIS_HOST", required=True),
        port=_require_port("REDIS_PORT", env_int("REDIS_PORT", required=True)),
        user=env_str("REDIS_USER"),
        password=env_str("REDIS_PW"),
        tls_enabled=bool(env_bool("REDIS_TLS_ENABLED", or_value=False)),
        connection=_load_connection_settings(),
    )

    service_name = env_str("SERVICE_NAME", required=True)
    service_settings = ServiceSettings(
        name=service_name,
        port=_require_port("SERVICE_PORT", env_int("SERVICE_PORT", DEFAULT_SERVICE_PORT)),
        host=env_str("SERVICE_HOST", "0.0.0.0"),
        environment=env_str("ENVIRONMENT", "development"),
        version=env_str("SERVICE_VERSION", "1.0.0"),
    )

    test_event_interval = env_int("TEST_EVENT_INTERVAL_SECONDS", 0)
    if test_event_interval < 0:
        raise ConfigurationError.invalid_value("TEST_EVENT_INTERVAL_SECONDS", test_event_interval, "Must not be negative")

    stream_settings = StreamSettings(
        name=validate_stream_name(env_str("STREAM", DEFAULT_STREAM_NAME)),
        consumer_group=env_str("CONSUMER_GROUP", service_name),
        test_event_interval_seconds=test_event_interval,
    )

    logging_settings = LoggingSettings(
        level=logging.getLevelName(resolve_level(env_str("LOG_LEVEL", "INFO"))),
        format=_validate_log_format(env_str("LOG_FORMAT", "text")),
    )

    monitoring_settings = MonitoringSettings(
        metrics_enabled=bool(env_bool("METRICS_ENABLED", or_value=False)),
        tracing_enabled=bool(env_bool("TRACE_ENABLED", or_value=False)),
        health_check_timeout_ms=_require_positive(
            "HEALTH_CHECK_TIMEOUT_MS", env_int("HEALTH_CHECK_TIMEOUT_MS", DEFAULT_HEALTH_CHECK_TIMEOUT_MS)
        ),
        shutdown_timeout_ms=_require_positive("SHUTDOWN_TIMEOUT_MS", env_int("SHUTDOWN_TIMEOUT_MS", DEFAULT_SHUTDOWN_TIMEOUT_MS)),
    )

    config = AppConfig(
        redis=redis_settings,
        service=service_settings,
        stream=stream_settings,
        logging=logging_settings,
        monitoring=monitoring_settings,
        timezone=env_str("TIMEZONE", "UTC"),
    )

    logger.info(
        "Configuration loaded and validated (service=%s, environment=%s, redis_host=%s, stream=%s, redis_auth=%s)",
        service_settings.name,
        service_settings.environment,
        redis_settings.host,
        stream_settings.name,
        "enabled" if redis_settings.user else "disabled",
    )
    return config


__all__ = [
    "AppConfig",
    "ConnectionSettings",
    "LoggingSettings",
    "MonitoringSettings",
    "RedisSettings",
    "ServiceSettings",
    "StreamSettings",
    "load_app_config",
    "mask_sensitive_data",
    "parse_retry_delays",
    "validate_stream_name",
]
