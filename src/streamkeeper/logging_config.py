"""
Centralized logging configuration for the service.

setup_logging configures the root logger once per process with a single
console handler on stdout. Two formats are supported:
- text: human readable lines with timestamp, logger name and level
- json: one JSON object per line, suitable for log shippers
"""

import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import orjson

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)

_LEVEL_NAMES = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON objects."""

    def __init__(self, service_name: Optional[str] = None, environment: Optional[str] = None) -> None:
        super().__init__()
        self.service_name = service_name
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "environment": self.environment,
            "context": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode("utf-8")


def resolve_level(level_name: str) -> int:
    """Map a configured level name to a logging level, falling back to INFO."""
    level = _LEVEL_NAMES.get(level_name.upper())
    if level is None:
        _MODULE_LOGGER.warning("Invalid log level: %s, defaulting to INFO", level_name)
        return logging.INFO
    return level


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as exc:  # Best-effort cleanup operation
            _MODULE_LOGGER.debug("Handler close failed: %s", exc)
    logger.handlers = []


def _build_console_handler(log_format: str, service_name: Optional[str], environment: Optional[str]) -> logging.Handler:
    if log_format == "json":
        formatter: logging.Formatter = JsonFormatter(service_name, environment)
    else:
        formatter = logging.Formatter(
            "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s",
            "%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    return console_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("redis.asyncio").setLevel(logging.WARNING)


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    *,
    service_name: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """Configure logging for the application"""

    with _config_lock:
        root_logger = logging.getLogger()
        _close_handlers(root_logger)

        root_logger.addHandler(_build_console_handler(log_format, service_name, environment))
        root_logger.setLevel(resolve_level(level))
        _suppress_noisy_third_parties()


__all__ = ["JsonFormatter", "resolve_level", "setup_logging"]
