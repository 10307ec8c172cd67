"""Stream publisher: wraps XADD with approximate trimming."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

import orjson
from redis.typing import EncodableT, FieldT

from ..typing import ensure_awaitable
from .constants import STREAM_DEFAULT_MAXLEN
from .message_decoder import to_str

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


async def stream_publish(
    redis_client: "Redis",
    stream_name: str,
    fields: Dict[str, Any],
    *,
    maxlen: int = STREAM_DEFAULT_MAXLEN,
) -> str:
    """Publish a message to a Redis stream.

    All field values are converted to strings (Redis stream requirement) and
    ``None`` values are dropped.

    Returns:
        The entry ID assigned by Redis.
    """
    str_fields: Dict[FieldT, EncodableT] = {k: str(v) for k, v in fields.items() if v is not None}

    entry_id: Any = await ensure_awaitable(
        redis_client.xadd(stream_name, str_fields, maxlen=maxlen, approximate=True),
    )
    entry_id = to_str(entry_id)
    logger.debug("Published to %s: %s", stream_name, entry_id)
    return entry_id


async def publish_event(
    redis_client: "Redis",
    stream_name: str,
    event: str,
    aggregate_id: str,
    data: Optional[Mapping[str, Any]] = None,
    *,
    service_name: str,
    headers: Optional[Mapping[str, str]] = None,
    maxlen: int = STREAM_DEFAULT_MAXLEN,
) -> str:
    """Publish a domain event using the service's stream field layout.

    Fields written: ``event``, ``aggregateId``, ``data`` (JSON), ``timestamp``
    (ISO-8601 UTC), ``serviceName`` and, when given, ``headers`` (JSON).

    Raises:
        TypeError: If ``data`` or ``headers`` cannot be serialized
    """
    fields: Dict[str, Any] = {
        "event": event,
        "aggregateId": aggregate_id,
        "data": orjson.dumps(dict(data or {})).decode("utf-8"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "serviceName": service_name,
    }
    if headers:
        fields["headers"] = orjson.dumps(dict(headers)).decode("utf-8")

    entry_id = await stream_publish(redis_client, stream_name, fields, maxlen=maxlen)
    logger.info("Event published: %s (%s) to %s as %s", event, aggregate_id, stream_name, entry_id)
    return entry_id


__all__ = ["publish_event", "stream_publish"]
