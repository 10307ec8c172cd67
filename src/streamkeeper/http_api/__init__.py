"""HTTP surface: health probes and operational endpoints."""

from .app import HttpServer, create_app
from .rate_limiter import FixedWindowRateLimiter, RateLimitDecision

__all__ = ["FixedWindowRateLimiter", "HttpServer", "RateLimitDecision", "create_app"]
