"""Console entry point."""

from __future__ import annotations

import logging
import sys

from .banner import show_banner
from .config.errors import ConfigurationError
from .config.runtime import env_str
from .config.settings import load_app_config
from .logging_config import setup_logging
from .service import run_service
from .service_runner import run_async_service

logger = logging.getLogger("streamkeeper")


def _bootstrap_logging() -> None:
    """Route records emitted while the configuration loads through the console handler."""
    setup_logging("INFO", (env_str("LOG_FORMAT", "text") or "text").lower())


def main() -> None:
    _bootstrap_logging()
    try:
        config = load_app_config()
    except ConfigurationError as exc:
        sys.stderr.write(f"Configuration error: {exc}\n")
        raise SystemExit(1) from exc

    setup_logging(
        config.logging.level,
        config.logging.format,
        service_name=config.service.name,
        environment=config.service.environment,
    )
    show_banner(config.service.name, config.service.version, config.service.environment)
    logger.info("Effective configuration: %s", config.masked())
    run_async_service(lambda: run_service(config), service_name=config.service.name, logger_name=logger.name)


if __name__ == "__main__":
    main()
