"""Single-use acknowledgement capability handed out with each inbound message."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

AckFunction = Callable[[str], Union[Awaitable[Any], Any]]


class AckHandle:
    """
    Acknowledge one stream entry at most once.

    The first call forwards to the underlying acknowledgement function and
    returns True. Every later call is logged and returns False without
    touching the stream.
    """

    def __init__(self, stream_id: str, ack_fn: AckFunction):
        self.stream_id = stream_id
        self._ack_fn = ack_fn
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    async def __call__(self, stream_id: Optional[str] = None) -> bool:
        target = stream_id or self.stream_id
        if self._consumed:
            logger.warning("Ignoring repeated acknowledgement for %s", target, extra={"stream_id": target})
            return False

        # Mark before awaiting so a concurrent second call cannot also ack.
        self._consumed = True
        result = self._ack_fn(target)
        if inspect.isawaitable(result):
            await result
        logger.debug("Acknowledged %s", target)
        return True


__all__ = ["AckFunction", "AckHandle"]
