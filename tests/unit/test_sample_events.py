"""Tests for the test-event publisher."""

import orjson
import pytest

from streamkeeper.sample_events import TEST_AGGREGATE_ID, TEST_EVENT_NAME, make_test_event_publisher


@pytest.mark.asyncio
async def test_publishes_test_event(fake_redis):
    publish = make_test_event_publisher(fake_redis, "orders", "Orders")

    entry_id = await publish()

    stored_id, fields = fake_redis.streams["orders"][0]
    assert stored_id == entry_id
    assert fields["event"] == TEST_EVENT_NAME
    assert fields["aggregateId"] == TEST_AGGREGATE_ID
    data = orjson.loads(fields["data"])
    assert data["message"] == "Message from Orders"
    assert "timestamp" in data
