"""Bounded retry schedule for establishing the Redis link."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

DEFAULT_FALLBACK_DELAY_SECONDS = 30.0


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many connection attempts to make and how long to wait between them.

    ``delays_seconds[i]`` is the pause after failed attempt ``i + 1``. Attempts
    beyond the end of the schedule wait ``fallback_delay_seconds``.
    """

    max_attempts: int
    delays_seconds: Tuple[float, ...]
    fallback_delay_seconds: float = DEFAULT_FALLBACK_DELAY_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1 (got {self.max_attempts})")
        if not self.delays_seconds:
            raise ValueError("delays_seconds must contain at least one delay")
        if any(delay < 0 for delay in self.delays_seconds) or self.fallback_delay_seconds < 0:
            raise ValueError("Retry delays must not be negative")

    @classmethod
    def from_milliseconds(
        cls,
        max_attempts: int,
        delays_ms: Sequence[int],
        fallback_delay_ms: int = int(DEFAULT_FALLBACK_DELAY_SECONDS * 1000),
    ) -> "RetryPolicy":
        return cls(
            max_attempts=max_attempts,
            delays_seconds=tuple(delay / 1000.0 for delay in delays_ms),
            fallback_delay_seconds=fallback_delay_ms / 1000.0,
        )

    def delay_for_attempt(self, attempt: int) -> float:
        """Return the wait applied after failed attempt ``attempt`` (1-based)."""
        if attempt < 1:
            raise ValueError(f"attempt must be 1-based (got {attempt})")
        if attempt <= len(self.delays_seconds):
            return self.delays_seconds[attempt - 1]
        return self.fallback_delay_seconds


__all__ = ["DEFAULT_FALLBACK_DELAY_SECONDS", "RetryPolicy"]
