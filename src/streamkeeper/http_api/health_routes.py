"""Liveness, readiness and detailed health endpoints."""

from __future__ import annotations

import logging

from aiohttp import web

from .keys import HEALTH_AGGREGATOR_KEY
from .responses import json_response

logger = logging.getLogger(__name__)

HEALTH_ENDPOINTS = ("/health/live", "/health/ready", "/health", "/health-check")


def setup_health_routes(app: web.Application) -> None:
    app.router.add_get("/health/live", liveness_handler)
    app.router.add_get("/health/ready", readiness_handler)
    app.router.add_get("/health", detailed_health_handler)
    app.router.add_get("/health-check", legacy_health_handler)


async def liveness_handler(request: web.Request) -> web.Response:
    """GET /health/live - process is up; touches no dependency."""
    result = request.app[HEALTH_AGGREGATOR_KEY].check_liveness()
    return web.Response(text=result["status"])


async def readiness_handler(request: web.Request) -> web.Response:
    """GET /health/ready - 200 when every dependency is healthy, else 503."""
    result = await request.app[HEALTH_AGGREGATOR_KEY].check_readiness()
    return json_response(result, status=200 if result["status"] == "ready" else 503)


async def detailed_health_handler(request: web.Request) -> web.Response:
    """GET /health - per-check detail; 503 only when unhealthy."""
    health = await request.app[HEALTH_AGGREGATOR_KEY].get_detailed_health()
    return json_response(health, status=503 if health["status"] == "unhealthy" else 200)


async def legacy_health_handler(request: web.Request) -> web.Response:
    """GET /health-check - plain text readiness for older probes."""
    result = await request.app[HEALTH_AGGREGATOR_KEY].check_readiness()
    if result["status"] == "ready":
        return web.Response(text="ok")
    return web.Response(text="not ok", status=503)


__all__ = ["HEALTH_ENDPOINTS", "setup_health_routes"]
