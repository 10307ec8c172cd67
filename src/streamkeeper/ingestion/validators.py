"""
Field validation for inbound stream messages.

Validation never raises. It returns either a ValidatedMessage carrying the
sanitized fields or a ValidationFailure naming the first field that failed.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

import orjson

from ..errors import ValidationError

MAX_STREAM_ID_LENGTH = 255
MAX_EVENT_LENGTH = 100
MAX_AGGREGATE_ID_LENGTH = 255
MAX_DATA_BYTES = 10_000

_STREAM_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]+")
_EVENT_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
_AGGREGATE_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

_MISSING = object()


@dataclass(frozen=True)
class ValidatedMessage:
    stream_id: str
    event: str
    aggregate_id: str
    data: Dict[str, Any]
    headers: Dict[str, str]
    ack: Callable[..., Any]


@dataclass(frozen=True)
class ValidationFailure:
    field: str
    reason: str

    def to_error(self) -> ValidationError:
        return ValidationError(self.field, self.reason)


ValidationResult = Union[ValidatedMessage, ValidationFailure]


def read_field(raw: Any, key: str, attribute: Optional[str] = None) -> Any:
    """Read ``key`` from a mapping, or ``attribute`` (default ``key``) from an object."""
    if isinstance(raw, Mapping):
        return raw.get(key)
    value = getattr(raw, attribute or key, _MISSING)
    if value is _MISSING and attribute is not None:
        value = getattr(raw, key, None)
    return None if value is _MISSING else value


def _check_identifier(field_name: str, value: Any, max_length: int, pattern: re.Pattern) -> Optional[ValidationFailure]:
    if not isinstance(value, str) or not value:
        return ValidationFailure(field_name, "must be a non-empty string")
    if len(value) > max_length:
        return ValidationFailure(field_name, f"too long (max {max_length} characters)")
    if not pattern.fullmatch(value):
        return ValidationFailure(field_name, "contains invalid characters")
    return None


def validate_data(value: Any) -> Union[Dict[str, Any], ValidationFailure]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        return ValidationFailure("data", "must be an object")
    data = dict(value)
    try:
        encoded = orjson.dumps(data)
    except TypeError as exc:
        return ValidationFailure("data", f"not serializable ({exc})")
    if len(encoded) > MAX_DATA_BYTES:
        return ValidationFailure("data", f"too large (max {MAX_DATA_BYTES} bytes)")
    return data


def validate_headers(value: Any) -> Union[Dict[str, str], ValidationFailure]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        return ValidationFailure("headers", "must be an object")

    headers: Dict[str, str] = {}
    for key, header_value in value.items():
        if not isinstance(key, str):
            return ValidationFailure("headers", f"header key {key!r} must be a string")
        if header_value is None:
            continue
        if not isinstance(header_value, str):
            return ValidationFailure("headers", f"value for {key!r} must be a string")
        headers[key] = header_value
    return headers


def validate_message(raw: Any) -> ValidationResult:
    """Validate structure first, then each field in order."""
    if raw is None:
        return ValidationFailure("message", "must be an object")
    ack = read_field(raw, "ack")
    if ack is None or not callable(ack):
        return ValidationFailure("message", "missing ack function")

    stream_id = read_field(raw, "streamId", "stream_id")
    failure = _check_identifier("streamId", stream_id, MAX_STREAM_ID_LENGTH, _STREAM_ID_PATTERN)
    if failure:
        return failure

    event = read_field(raw, "event")
    failure = _check_identifier("event", event, MAX_EVENT_LENGTH, _EVENT_PATTERN)
    if failure:
        return failure

    aggregate_id = read_field(raw, "aggregateId", "aggregate_id")
    failure = _check_identifier("aggregateId", aggregate_id, MAX_AGGREGATE_ID_LENGTH, _AGGREGATE_ID_PATTERN)
    if failure:
        return failure

    data = validate_data(read_field(raw, "data"))
    if isinstance(data, ValidationFailure):
        return data

    headers = validate_headers(read_field(raw, "headers"))
    if isinstance(headers, ValidationFailure):
        return headers

    return ValidatedMessage(
        stream_id=stream_id,
        event=event,
        aggregate_id=aggregate_id,
        data=data,
        headers=headers,
        ack=ack,
    )


__all__ = [
    "MAX_DATA_BYTES",
    "ValidatedMessage",
    "ValidationFailure",
    "ValidationResult",
    "read_field",
    "validate_data",
    "validate_headers",
    "validate_message",
]
