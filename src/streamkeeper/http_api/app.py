"""aiohttp application factory and server wrapper."""

from __future__ import annotations

import logging
from typing import Optional

from aiohttp import web

from ..health.aggregator import HealthAggregator
from .api_routes import setup_api_routes
from .health_routes import HEALTH_ENDPOINTS, setup_health_routes
from .keys import (
    HEALTH_AGGREGATOR_KEY,
    RATE_LIMITER_KEY,
    STREAM_NAME_KEY,
    TEST_EVENT_PUBLISHER_KEY,
    TestEventPublisher,
)
from .middleware import correlation_id_middleware
from .rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


def create_app(
    *,
    health_aggregator: HealthAggregator,
    rate_limiter: FixedWindowRateLimiter,
    publish_test_event: TestEventPublisher,
    stream_name: str,
) -> web.Application:
    app = web.Application(middlewares=[correlation_id_middleware])
    app[HEALTH_AGGREGATOR_KEY] = health_aggregator
    app[RATE_LIMITER_KEY] = rate_limiter
    app[TEST_EVENT_PUBLISHER_KEY] = publish_test_event
    app[STREAM_NAME_KEY] = stream_name

    setup_health_routes(app)
    setup_api_routes(app)
    logger.info(
        "HTTP endpoints registered: %s, /trigger-test-event (health timeout %.1fs)",
        ", ".join(HEALTH_ENDPOINTS),
        health_aggregator.timeout_seconds,
    )
    return app


class HttpServer:
    """Runs an aiohttp application on a TCP site."""

    def __init__(self, app: web.Application, host: str, port: int):
        self.app = app
        self.host = host
        self.port = port
        self._runner: Optional[web.AppRunner] = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        runner = web.AppRunner(self.app, access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        logger.info("HTTP server listening on http://%s:%s", self.host, self.port)

    async def stop(self) -> None:
        runner, self._runner = self._runner, None
        if runner is None:
            return
        await runner.cleanup()
        logger.info("HTTP server stopped")


__all__ = ["HttpServer", "create_app"]
