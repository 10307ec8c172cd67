"""Background Redis Streams consumer feeding the ingestion pipeline."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from ..process_status import ProcessStatusRegistry
from ..redis_protocol.error_types import REDIS_ERRORS
from ..redis_protocol.retry import RedisRetryError
from ..redis_protocol.streams import (
    PENDING_CLAIM_IDLE_MS,
    READ_BATCH_SIZE,
    READ_BLOCK_MS,
    StreamEntry,
    acknowledge_entry,
    claim_pending_entries,
    decode_stream_response,
    ensure_consumer_group,
)
from ..redis_protocol.typing import RedisClient, ensure_awaitable
from .ack import AckHandle
from .message import build_inbound_message
from .pipeline import EventIngestionPipeline

logger = logging.getLogger(__name__)

DEFAULT_ERROR_PAUSE_SECONDS = 1.0

_CONSUMER_ERRORS = REDIS_ERRORS + (RedisRetryError,)


class StreamConsumer:
    """
    Reads new entries for one consumer group and delivers them one at a time.

    ``registry.stream_active`` is True while reads succeed and False once the
    consumer is stopped or a read fails.
    """

    def __init__(
        self,
        redis_client: RedisClient,
        pipeline: EventIngestionPipeline,
        registry: ProcessStatusRegistry,
        *,
        stream: str,
        group: str,
        consumer_name: str,
        batch_size: int = READ_BATCH_SIZE,
        block_ms: int = READ_BLOCK_MS,
        claim_idle_ms: int = PENDING_CLAIM_IDLE_MS,
        error_pause_seconds: float = DEFAULT_ERROR_PAUSE_SECONDS,
    ):
        self._redis = redis_client
        self._pipeline = pipeline
        self._registry = registry
        self.stream = stream
        self.group = group
        self.consumer_name = consumer_name
        self.batch_size = batch_size
        self.block_ms = block_ms
        self.claim_idle_ms = claim_idle_ms
        self.error_pause_seconds = error_pause_seconds
        self._task: Optional[asyncio.Task] = None
        self._prepared = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            logger.debug("Stream consumer already running")
            return
        self._task = asyncio.create_task(self._run(), name=f"stream-consumer:{self.stream}")
        logger.info(
            "Stream consumer started (stream=%s, group=%s, consumer=%s)",
            self.stream,
            self.group,
            self.consumer_name,
        )

    async def stop(self) -> None:
        self._registry.set_stream_active(False)
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("Stream consumer task cancelled")
        logger.info("Stream consumer stopped")

    async def _prepare(self) -> None:
        await ensure_consumer_group(self._redis, self.stream, self.group)
        claimed = await claim_pending_entries(
            self._redis, self.stream, self.group, self.consumer_name, idle_ms=self.claim_idle_ms
        )
        self._registry.set_stream_active(True)
        self._prepared = True
        for entry in claimed:
            await self._deliver(entry)

    async def read_batch(self) -> list[StreamEntry]:
        result: Any = await ensure_awaitable(
            self._redis.xreadgroup(
                self.group,
                self.consumer_name,
                {self.stream: ">"},
                count=self.batch_size,
                block=self.block_ms,
            )
        )
        return decode_stream_response(result)

    async def _deliver(self, entry: StreamEntry) -> None:
        entry_id, fields = entry
        ack = AckHandle(entry_id, self._ack)
        await self._pipeline.on_message(build_inbound_message(entry_id, fields, ack))

    async def _ack(self, entry_id: str) -> None:
        await acknowledge_entry(self._redis, self.stream, self.group, entry_id)

    async def run_once(self) -> int:
        """Prepare if needed, then read and deliver one batch. Returns the batch size."""
        if not self._prepared:
            await self._prepare()
        entries = await self.read_batch()
        self._registry.set_stream_active(True)
        for entry in entries:
            await self._deliver(entry)
        return len(entries)

    async def _run(self) -> None:
        while True:
            try:
                await self.run_once()
            except _CONSUMER_ERRORS as exc:
                logger.error("Stream read failed on %s: %s", self.stream, exc)
                await self._pause_after_failure()
            except Exception as exc:  # the loop must outlive any single bad batch
                logger.error(
                    "Unexpected error consuming %s (group=%s): %s",
                    self.stream,
                    self.group,
                    exc,
                    exc_info=True,
                )
                await self._pause_after_failure()

    async def _pause_after_failure(self) -> None:
        self._registry.set_stream_active(False)
        self._prepared = False
        await asyncio.sleep(self.error_pause_seconds)


__all__ = ["StreamConsumer"]
