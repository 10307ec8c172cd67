"""Tests for the console entry point."""

import logging
from unittest.mock import MagicMock, call

import pytest

from streamkeeper import main as main_module


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def runner(monkeypatch):
    runner = MagicMock()
    monkeypatch.setattr(main_module, "run_async_service", runner)
    monkeypatch.setattr(main_module, "show_banner", MagicMock())
    return runner


def test_configuration_error_exits_before_startup(monkeypatch, capsys, runner, restore_root_logger):
    monkeypatch.delenv("REDIS_HOST", raising=False)

    with pytest.raises(SystemExit) as exc_info:
        main_module.main()

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("Configuration error:")
    assert "REDIS_HOST" in err
    runner.assert_not_called()


def test_starts_service_with_loaded_config(monkeypatch, runner):
    setup_logging = MagicMock()
    monkeypatch.setattr(main_module, "setup_logging", setup_logging)
    monkeypatch.setenv("SERVICE_NAME", "Test-Service")
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_FORMAT", "JSON")

    main_module.main()

    assert setup_logging.call_args_list == [
        call("INFO", "json"),
        call("DEBUG", "json", service_name="Test-Service", environment="development"),
    ]
    runner.assert_called_once()
    assert runner.call_args.kwargs["service_name"] == "Test-Service"


def test_config_load_warnings_use_console_formatter(monkeypatch, capsys, runner, restore_root_logger):
    monkeypatch.setenv("CONNECTION_TIMEOUT", "500")
    monkeypatch.setenv("LOG_FORMAT", "text")
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    main_module.main()

    out = capsys.readouterr().out
    assert "streamkeeper.config.settings - WARNING - Connection timeout is very low (500ms)" in out
    assert "Configuration loaded and validated" in out
