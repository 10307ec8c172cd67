"""Fixed-window limiter for the manual test-event trigger."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable

from ..process_status import ProcessStatusRegistry

DEFAULT_WINDOW_SECONDS = 1.0


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_seconds: int = 0


class FixedWindowRateLimiter:
    """Accept at most one call per window for the whole process.

    The time of the last accepted call lives in the process registry, so every
    request handler shares one window. Rejected calls do not move the window.
    """

    def __init__(
        self,
        registry: ProcessStatusRegistry,
        *,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self.window_seconds = window_seconds
        self._clock = clock

    def try_acquire(self) -> RateLimitDecision:
        now = self._clock()
        last = self._registry.last_test_event_at
        if last is not None:
            elapsed = now - last
            if elapsed < self.window_seconds:
                return RateLimitDecision(False, math.ceil(self.window_seconds - elapsed))
        self._registry.record_test_event(now)
        return RateLimitDecision(True)


__all__ = ["DEFAULT_WINDOW_SECONDS", "FixedWindowRateLimiter", "RateLimitDecision"]
