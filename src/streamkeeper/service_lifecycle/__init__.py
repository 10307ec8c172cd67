"""Background jobs and process shutdown."""

from .periodic_job import PeriodicJob
from .shutdown_orchestrator import ShutdownOrchestrator, ShutdownPhase, force_exit

__all__ = ["PeriodicJob", "ShutdownOrchestrator", "ShutdownPhase", "force_exit"]
