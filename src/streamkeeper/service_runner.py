from __future__ import annotations

"""Run the long-lived async service and map fatal errors to exit status 1."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional

from .config.errors import ConfigurationError
from .errors import ConnectionExhaustedError

FATAL_STARTUP_ERRORS = (ConfigurationError, ConnectionExhaustedError, OSError)

ServiceFactory = Callable[[], Coroutine[Any, Any, None]]


def run_async_service(
    factory: ServiceFactory,
    *,
    service_name: str,
    logger_name: Optional[str] = None,
) -> None:
    """Run an async service with consistent interrupt and fatal-error handling.

    Args:
        factory: Callable returning the coroutine to execute.
        service_name: Identifier used in log messages.
        logger_name: Optional logger name override.

    Raises:
        SystemExit: With the service's exit code, or 1 on a fatal error.
    """

    logger = logging.getLogger(logger_name or __name__)

    try:
        asyncio.run(factory())
    except KeyboardInterrupt as exc:
        # Second Ctrl+C after graceful shutdown already began.
        logger.warning("%s service interrupted during shutdown", service_name)
        raise SystemExit(1) from exc
    except FATAL_STARTUP_ERRORS as exc:
        logger.critical("%s failed to start: %s", service_name, exc)
        raise SystemExit(1) from exc
