"""Tests for inbound message validation."""

from types import SimpleNamespace

import pytest

from streamkeeper.errors import ValidationError
from streamkeeper.ingestion.validators import (
    MAX_DATA_BYTES,
    ValidatedMessage,
    ValidationFailure,
    read_field,
    validate_data,
    validate_headers,
    validate_message,
)


def _noop_ack(stream_id):
    return None


def _raw(**overrides):
    raw = {
        "streamId": "1700000000000-0",
        "event": "order_created",
        "aggregateId": "order-42",
        "data": {"total": 10},
        "headers": {"trace": "abc"},
        "ack": _noop_ack,
    }
    raw.update(overrides)
    return raw


class TestValidateMessage:
    def test_valid_message(self):
        result = validate_message(_raw())

        assert isinstance(result, ValidatedMessage)
        assert result.stream_id == "1700000000000-0"
        assert result.data == {"total": 10}
        assert result.headers == {"trace": "abc"}

    def test_object_with_snake_case_attributes(self):
        raw = SimpleNamespace(
            stream_id="1-0", event="created", aggregate_id="a-1", data=None, headers=None, ack=_noop_ack
        )

        result = validate_message(raw)

        assert isinstance(result, ValidatedMessage)
        assert result.data == {}
        assert result.headers == {}

    def test_missing_ack_is_structural_failure(self):
        result = validate_message(_raw(ack=None))

        assert result == ValidationFailure("message", "missing ack function")

    def test_none_message(self):
        assert isinstance(validate_message(None), ValidationFailure)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("streamId", ""),
            ("streamId", "1-0 bad"),
            ("streamId", "x" * 256),
            ("event", "order created"),
            ("event", "e" * 101),
            ("event", 42),
            ("aggregateId", "a/b"),
            ("aggregateId", "a." * 5),
            ("aggregateId", ""),
            ("aggregateId", None),
        ],
    )
    def test_invalid_identifiers(self, field, value):
        result = validate_message(_raw(**{field: value}))

        assert isinstance(result, ValidationFailure)
        assert result.field == field

    def test_boundary_lengths_accepted(self):
        result = validate_message(_raw(streamId="s" * 255, event="e" * 100, aggregateId="a" * 255))

        assert isinstance(result, ValidatedMessage)

    def test_failure_converts_to_error(self):
        error = ValidationFailure("event", "contains invalid characters").to_error()

        assert isinstance(error, ValidationError)
        assert error.field == "event"
        assert str(error) == "event: contains invalid characters"


class TestValidateData:
    def test_none_becomes_empty(self):
        assert validate_data(None) == {}

    def test_non_mapping_rejected(self):
        assert isinstance(validate_data([1, 2]), ValidationFailure)
        assert isinstance(validate_data("raw"), ValidationFailure)

    def test_oversized_payload_rejected(self):
        result = validate_data({"blob": "x" * MAX_DATA_BYTES})

        assert isinstance(result, ValidationFailure)
        assert "too large" in result.reason

    def test_unserializable_payload_rejected(self):
        assert isinstance(validate_data({"value": object()}), ValidationFailure)


class TestValidateHeaders:
    def test_none_values_dropped(self):
        assert validate_headers({"a": "1", "b": None}) == {"a": "1"}

    @pytest.mark.parametrize("value", [1, True, 2.5, ["x"]])
    def test_non_string_values_rejected(self, value):
        result = validate_headers({"a": value})

        assert isinstance(result, ValidationFailure)
        assert result.field == "headers"


def test_read_field_prefers_mapping_key():
    assert read_field({"streamId": "1-0", "stream_id": "other"}, "streamId", "stream_id") == "1-0"
    assert read_field(SimpleNamespace(streamId="2-0"), "streamId", "stream_id") == "2-0"
    assert read_field(SimpleNamespace(), "streamId", "stream_id") is None
