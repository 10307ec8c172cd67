"""Environment-backed configuration for the service."""

from .errors import ConfigurationError
from .runtime import (
    env_bool,
    env_int,
    env_str,
    reset_default_values,
)
from .settings import (
    AppConfig,
    ConnectionSettings,
    LoggingSettings,
    MonitoringSettings,
    RedisSettings,
    ServiceSettings,
    StreamSettings,
    load_app_config,
    mask_sensitive_data,
)

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "ConnectionSettings",
    "LoggingSettings",
    "MonitoringSettings",
    "RedisSettings",
    "ServiceSettings",
    "StreamSettings",
    "env_bool",
    "env_int",
    "env_str",
    "load_app_config",
    "mask_sensitive_data",
    "reset_default_values",
]
