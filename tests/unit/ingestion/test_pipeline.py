"""Tests for the event ingestion pipeline."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from streamkeeper.ingestion.pipeline import EventIngestionPipeline, IngestionOutcome

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _raw(ack, **overrides):
    raw = {
        "streamId": "1-0",
        "event": "order_created",
        "aggregateId": "order-1",
        "ack": ack,
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def handler():
    return AsyncMock()


@pytest.fixture
def pipeline(handler, registry):
    return EventIngestionPipeline(handler, registry, clock=lambda: FIXED_NOW)


class TestOnMessage:
    @pytest.mark.asyncio
    async def test_valid_message_is_handled_then_acked(self, pipeline, handler, registry):
        ack = AsyncMock(return_value=True)

        outcome = await pipeline.on_message(_raw(ack))

        assert outcome is IngestionOutcome.ACKED
        event = handler.await_args.args[0]
        assert event.stream_id == "1-0"
        assert event.data == {}
        assert event.headers == {}
        assert event.received_at == FIXED_NOW
        ack.assert_awaited_once_with("1-0")
        assert registry.last_message_at == FIXED_NOW

    @pytest.mark.asyncio
    async def test_invalid_message_is_neither_handled_nor_acked(self, pipeline, handler, registry, caplog):
        ack = AsyncMock()

        with caplog.at_level("WARNING"):
            outcome = await pipeline.on_message(_raw(ack, event="bad event"))

        assert outcome is IngestionOutcome.REJECTED
        handler.assert_not_awaited()
        ack.assert_not_awaited()
        assert registry.last_message_at is None
        assert "Rejected invalid stream message" in caplog.text

    @pytest.mark.asyncio
    async def test_handler_failure_still_acks(self, pipeline, handler, caplog):
        handler.side_effect = ValueError("boom")
        ack = AsyncMock(return_value=True)

        with caplog.at_level("ERROR"):
            outcome = await pipeline.on_message(_raw(ack))

        assert outcome is IngestionOutcome.HANDLER_FAILED
        ack.assert_awaited_once()
        assert "Handler failed for order_created" in caplog.text

    @pytest.mark.asyncio
    async def test_ack_failure_is_reported(self, pipeline):
        ack = AsyncMock(side_effect=ConnectionError("lost"))

        assert await pipeline.on_message(_raw(ack)) is IngestionOutcome.ACK_FAILED

    @pytest.mark.asyncio
    async def test_ack_returning_false_is_reported(self, pipeline):
        ack = AsyncMock(return_value=False)

        assert await pipeline.on_message(_raw(ack)) is IngestionOutcome.ACK_FAILED

    @pytest.mark.asyncio
    async def test_ack_failure_takes_precedence_over_handler_failure(self, pipeline, handler):
        handler.side_effect = ValueError("boom")
        ack = AsyncMock(side_effect=ConnectionError("lost"))

        assert await pipeline.on_message(_raw(ack)) is IngestionOutcome.ACK_FAILED

    @pytest.mark.asyncio
    async def test_sync_handler_and_ack(self, registry):
        handler = MagicMock(return_value=None)
        ack = MagicMock(return_value=None)
        pipeline = EventIngestionPipeline(handler, registry)

        outcome = await pipeline.on_message(_raw(ack, data={"k": "v"}))

        assert outcome is IngestionOutcome.ACKED
        assert handler.call_args.args[0].data == {"k": "v"}
        ack.assert_called_once_with("1-0")
