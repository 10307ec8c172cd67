"""Tests for run_async_service."""

import pytest

from streamkeeper.config.errors import ConfigurationError
from streamkeeper.errors import ConnectionExhaustedError
from streamkeeper.service_runner import run_async_service


def test_returns_when_service_completes():
    calls = []

    async def service():
        calls.append("ran")

    run_async_service(service, service_name="orders")

    assert calls == ["ran"]


def test_system_exit_code_passes_through():
    async def service():
        raise SystemExit(0)

    with pytest.raises(SystemExit) as exc_info:
        run_async_service(service, service_name="orders")
    assert exc_info.value.code == 0


@pytest.mark.parametrize(
    "error",
    [
        ConnectionExhaustedError(5, "Connection refused"),
        ConfigurationError("bad"),
        OSError("address already in use"),
    ],
)
def test_fatal_errors_exit_with_status_one(error, caplog):
    async def service():
        raise error

    with caplog.at_level("CRITICAL"):
        with pytest.raises(SystemExit) as exc_info:
            run_async_service(service, service_name="orders")

    assert exc_info.value.code == 1
    assert "orders failed to start" in caplog.text


def test_keyboard_interrupt_exits_with_status_one():
    async def service():
        raise KeyboardInterrupt

    with pytest.raises(SystemExit) as exc_info:
        run_async_service(service, service_name="orders")
    assert exc_info.value.code == 1


def test_unexpected_errors_propagate():
    async def service():
        raise ZeroDivisionError

    with pytest.raises(ZeroDivisionError):
        run_async_service(service, service_name="orders")
