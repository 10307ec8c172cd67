"""Typed application keys shared by the route modules."""

from __future__ import annotations

from typing import Awaitable, Callable

from aiohttp import web

from ..health.aggregator import HealthAggregator
from .rate_limiter import FixedWindowRateLimiter

TestEventPublisher = Callable[[], Awaitable[str]]

HEALTH_AGGREGATOR_KEY = web.AppKey("health_aggregator", HealthAggregator)
RATE_LIMITER_KEY = web.AppKey("rate_limiter", FixedWindowRateLimiter)
TEST_EVENT_PUBLISHER_KEY = web.AppKey("test_event_publisher", TestEventPublisher)
STREAM_NAME_KEY = web.AppKey("stream_name", str)
