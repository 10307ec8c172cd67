"""Redis connection lifecycle."""

from .lifecycle_manager import ConnectionLifecycleManager
from .retry_policy import RetryPolicy

__all__ = ["ConnectionLifecycleManager", "RetryPolicy"]
