"""
Connection states for the Redis link.

Transitions are driven only by the connection lifecycle manager; everything
else reads them.
"""

from enum import Enum


class ConnectionState(Enum):
    """Progression of the link from idle to usable, or to given up."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"
