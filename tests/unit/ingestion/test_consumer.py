"""Tests for the stream consumer."""

import asyncio
from unittest.mock import AsyncMock

import orjson
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from streamkeeper.ingestion.consumer import StreamConsumer
from streamkeeper.ingestion.pipeline import EventIngestionPipeline
from streamkeeper.redis_protocol import retry


@pytest.fixture
def handler():
    return AsyncMock()


@pytest.fixture
def consumer(fake_redis, registry, handler):
    pipeline = EventIngestionPipeline(handler, registry)
    return StreamConsumer(
        fake_redis,
        pipeline,
        registry,
        stream="orders",
        group="billing",
        consumer_name="worker-1",
        block_ms=10,
        error_pause_seconds=0.01,
    )


async def _publish(fake_redis, event="order_created", aggregate_id="order-1", data=None):
    return await fake_redis.xadd(
        "orders",
        {"event": event, "aggregateId": aggregate_id, "data": orjson.dumps(data or {}).decode()},
    )


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_creates_group_and_marks_active(self, consumer, fake_redis, registry):
        assert await consumer.run_once() == 0

        assert ("orders", "billing") in fake_redis.groups
        assert registry.stream_active is True

    @pytest.mark.asyncio
    async def test_delivers_and_acks_entries(self, consumer, fake_redis, handler):
        await consumer.run_once()
        first = await _publish(fake_redis, data={"total": 5})
        second = await _publish(fake_redis, aggregate_id="order-2")

        assert await consumer.run_once() == 2

        delivered = [call.args[0] for call in handler.await_args_list]
        assert [event.stream_id for event in delivered] == [first, second]
        assert delivered[0].data == {"total": 5}
        assert fake_redis.acked == [("orders", "billing", first), ("orders", "billing", second)]

    @pytest.mark.asyncio
    async def test_invalid_entries_stay_pending(self, consumer, fake_redis, handler):
        await consumer.run_once()
        entry_id = await _publish(fake_redis, event="not valid")

        await consumer.run_once()

        handler.assert_not_awaited()
        assert fake_redis.acked == []
        assert entry_id in fake_redis.groups[("orders", "billing")]["pending"]

    @pytest.mark.asyncio
    async def test_pending_entries_are_claimed_on_first_read(self, consumer, fake_redis, handler):
        await fake_redis.xgroup_create("orders", "billing", id="0", mkstream=True)
        entry_id = await _publish(fake_redis)
        await fake_redis.xreadgroup("billing", "crashed-worker", {"orders": ">"})

        await consumer.run_once()

        handler.assert_awaited_once()
        assert fake_redis.acked == [("orders", "billing", entry_id)]

    @pytest.mark.asyncio
    async def test_read_failure_propagates(self, consumer, fake_redis):
        await consumer.run_once()
        fake_redis.xreadgroup = AsyncMock(side_effect=RedisConnectionError("down"))

        with pytest.raises(RedisConnectionError):
            await consumer.run_once()


class TestBackgroundLoop:
    @pytest.mark.asyncio
    async def test_read_failure_marks_inactive(self, consumer, fake_redis, registry, monkeypatch):
        monkeypatch.setattr(retry, "_sleep", AsyncMock())
        fake_redis.xgroup_create = AsyncMock(side_effect=RedisConnectionError("down"))
        registry.set_stream_active(True)

        consumer.start()
        await asyncio.sleep(0.05)

        assert registry.stream_active is False
        assert consumer.running
        await consumer.stop()

    @pytest.mark.asyncio
    async def test_start_stop(self, consumer, registry):
        consumer.start()
        await asyncio.sleep(0.02)
        assert consumer.running
        assert registry.stream_active is True

        await consumer.stop()

        assert not consumer.running
        assert registry.stream_active is False

    @pytest.mark.asyncio
    async def test_stop_without_start(self, consumer, registry):
        await consumer.stop()

        assert registry.stream_active is False

    @pytest.mark.asyncio
    async def test_undecodable_batch_does_not_stop_consumer(self, consumer, fake_redis, registry, handler, caplog):
        read = fake_redis.xreadgroup
        failures = []

        async def read_once_broken(*args, **kwargs):
            if not failures:
                failures.append(True)
                raise UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")
            return await read(*args, **kwargs)

        fake_redis.xreadgroup = read_once_broken
        entry_id = await _publish(fake_redis, aggregate_id="order-2")

        with caplog.at_level("ERROR"):
            consumer.start()
            for _ in range(100):
                if handler.await_count:
                    break
                await asyncio.sleep(0.01)

        assert consumer.running
        assert registry.stream_active is True
        assert [call.args[0].stream_id for call in handler.await_args_list] == [entry_id]
        assert "Unexpected error consuming orders" in caplog.text
        await consumer.stop()

    @pytest.mark.asyncio
    async def test_replacement_decoded_payload_is_rejected_not_fatal(self, consumer, fake_redis, handler):
        await consumer.run_once()
        bad_id = await fake_redis.xadd("orders", {"event": "bad", "aggregateId": "a1", "data": "\ufffd\ufffd"})
        good_id = await _publish(fake_redis, event="good", aggregate_id="a2")

        assert await consumer.run_once() == 2

        assert [call.args[0].stream_id for call in handler.await_args_list] == [good_id]
        assert bad_id in fake_redis.groups[("orders", "billing")]["pending"]
