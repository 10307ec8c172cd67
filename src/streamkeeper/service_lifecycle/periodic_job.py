"""Repeating background coroutine with isolated failures."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicJob:
    """Run ``action`` every ``interval_seconds`` until stopped.

    The first run happens one interval after ``start``. A failing run is
    logged and the schedule carries on.
    """

    def __init__(self, name: str, interval_seconds: float, action: Callable[[], Awaitable[Any]]):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive (got {interval_seconds})")
        self.name = name
        self.interval_seconds = interval_seconds
        self._action = action
        self._task: Optional[asyncio.Task] = None
        self.runs = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"periodic:{self.name}")
        logger.info("Scheduled job %s every %ss", self.name, self.interval_seconds)

    async def run_once(self) -> None:
        self.runs += 1
        try:
            await self._action()
        except Exception as exc:  # a failed run must not end the schedule
            self.failures += 1
            logger.error("Scheduled job %s failed: %s", self.name, exc, exc_info=True)

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.run_once()

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("Scheduled job %s cancelled", self.name)
        logger.info("Scheduled job %s stopped", self.name)


__all__ = ["PeriodicJob"]
