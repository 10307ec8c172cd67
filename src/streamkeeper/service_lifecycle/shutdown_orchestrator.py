"""
Graceful shutdown on SIGINT/SIGTERM.

The orchestrator moves through RUNNING -> SHUTTING_DOWN -> TERMINATED exactly
once. Teardown runs in a fixed order under a hard deadline:

1. stop the HTTP server
2. stop background jobs (periodic publisher, stream consumer)
3. disconnect from Redis

If the deadline fires first the process is force-exited with status 1.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from enum import Enum
from typing import Any, Awaitable, Callable, List, NoReturn, Optional, Protocol, Sequence

from ..errors import ShutdownTimeoutError
from ..process_status import ProcessStatusRegistry

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 30.0
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class Stoppable(Protocol):
    async def stop(self) -> None: ...


class Disconnectable(Protocol):
    async def disconnect(self) -> None: ...


class ShutdownPhase(Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


def force_exit(code: int) -> NoReturn:
    """Flush logging and leave immediately, skipping any pending cleanup."""
    logging.shutdown()
    os._exit(code)


class ShutdownOrchestrator:
    """Runs teardown once and reports the resulting exit code."""

    def __init__(
        self,
        registry: ProcessStatusRegistry,
        *,
        connection_manager: Disconnectable,
        http_server: Optional[Stoppable] = None,
        background_jobs: Sequence[Stoppable] = (),
        timeout_seconds: float = DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
        exit_process: Callable[[int], Any] = force_exit,
    ):
        self._registry = registry
        self._connection_manager = connection_manager
        self._http_server = http_server
        self._background_jobs: List[Stoppable] = list(background_jobs)
        self.timeout_seconds = timeout_seconds
        self._exit_process = exit_process

        self._phase = ShutdownPhase.RUNNING
        self._exit_code: Optional[int] = None
        self._terminated = asyncio.Event()
        self._deadline: Optional[asyncio.TimerHandle] = None
        self._signal_loop: Optional[asyncio.AbstractEventLoop] = None
        self._registered_signals: List[signal.Signals] = []
        self._shutdown_task: Optional[asyncio.Task] = None

    @property
    def phase(self) -> ShutdownPhase:
        return self._phase

    @property
    def exit_code(self) -> Optional[int]:
        return self._exit_code

    def add_background_job(self, job: Stoppable) -> None:
        self._background_jobs.append(job)

    def register_signals(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Install SIGINT/SIGTERM handlers on the event loop."""
        if self._registered_signals:
            logger.warning("Signal handlers already registered")
            return

        loop = loop or asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except NotImplementedError:
                logger.warning("Signal handling not supported on this platform for %s", sig.name)
                continue
            self._registered_signals.append(sig)
        self._signal_loop = loop
        logger.debug("Registered shutdown handlers for %s", ", ".join(sig.name for sig in self._registered_signals))

    def unregister_signals(self) -> None:
        loop = self._signal_loop
        if loop is None:
            return
        for sig in self._registered_signals:
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, ValueError, RuntimeError) as exc:
                logger.warning("Failed to remove signal handler for %s: %s", sig.name, exc)
        self._registered_signals = []
        self._signal_loop = None

    def _on_signal(self, sig: signal.Signals) -> None:
        if self._shutdown_task is not None:
            logger.warning("Shutdown already requested; ignoring %s", sig.name)
            return
        self._shutdown_task = asyncio.get_running_loop().create_task(self.shutdown(sig.name))

    def _on_deadline(self) -> None:
        if self._phase is not ShutdownPhase.SHUTTING_DOWN:
            return
        error = ShutdownTimeoutError(self.timeout_seconds)
        logger.critical("%s", error)
        self._exit_process(1)

    async def shutdown(self, reason: str = "programmatic") -> Optional[int]:
        """
        Tear the service down once.

        Returns:
            The exit code for the first call, None for any later call
        """
        if self._phase is not ShutdownPhase.RUNNING:
            logger.warning("Shutdown already in progress (requested by %s)", reason)
            return None
        self._phase = ShutdownPhase.SHUTTING_DOWN
        self._registry.mark_shutting_down()

        started = time.monotonic()
        logger.info("Shutdown initiated by %s", reason)
        self.unregister_signals()
        self._deadline = asyncio.get_running_loop().call_later(self.timeout_seconds, self._on_deadline)

        try:
            failures = await self._teardown()
        finally:
            self._deadline.cancel()
            self._deadline = None

        exit_code = 1 if failures else 0
        if failures:
            logger.error("Shutdown finished with errors in: %s", ", ".join(failures))
        else:
            logger.info("Graceful shutdown completed in %.0fms", (time.monotonic() - started) * 1000.0)

        self._exit_code = exit_code
        self._phase = ShutdownPhase.TERMINATED
        self._terminated.set()
        return exit_code

    async def _teardown(self) -> List[str]:
        steps: List[tuple[str, Callable[[], Awaitable[None]]]] = []
        if self._http_server is not None:
            steps.append(("http_server", self._http_server.stop))
        for job in self._background_jobs:
            steps.append((type(job).__name__, job.stop))
        steps.append(("redis", self._connection_manager.disconnect))

        failures: List[str] = []
        for name, step in steps:
            logger.info("Stopping %s", name)
            try:
                await step()
            except Exception as exc:  # keep tearing down the remaining steps
                logger.error("Error stopping %s: %s", name, exc, exc_info=True)
                failures.append(name)
        return failures

    async def wait_for_exit(self) -> NoReturn:
        """Block until shutdown finishes, then raise ``SystemExit`` with its code."""
        await self._terminated.wait()
        raise SystemExit(self._exit_code if self._exit_code is not None else 1)


__all__ = [
    "DEFAULT_SHUTDOWN_TIMEOUT_SECONDS",
    "ShutdownOrchestrator",
    "ShutdownPhase",
    "force_exit",
]
