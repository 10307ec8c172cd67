"""Process-wide status shared between the consumer, HTTP layer and shutdown."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ProcessStatusRegistry:
    """
    Mutable status for a single service process.

    One instance is created at startup and handed to every component that
    needs it. All access happens on the event loop thread, so plain attribute
    reads and writes are enough; the last write wins.

    Attributes:
        shutting_down: Set once when graceful shutdown begins
        stream_active: True while the stream consumer is reading successfully
        last_message_at: When the most recent valid message was accepted
        last_test_event_at: Monotonic time of the last accepted test-event trigger
    """

    shutting_down: bool = False
    stream_active: bool = False
    last_message_at: Optional[datetime] = None
    last_test_event_at: Optional[float] = None

    def mark_shutting_down(self) -> None:
        self.shutting_down = True

    def set_stream_active(self, active: bool) -> None:
        self.stream_active = active

    def record_message(self, received_at: datetime) -> None:
        self.last_message_at = received_at

    def record_test_event(self, monotonic_time: float) -> None:
        self.last_test_event_at = monotonic_time
