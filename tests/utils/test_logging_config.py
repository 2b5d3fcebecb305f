# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `commentwrap.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Can disable console logging when `log_to_console` is set to False.
- Enables the transition trace only when COMMENTWRAP_TRACE is set.

The tests run in a temporary working directory to avoid touching real files.
"""

import logging

import pytest

from commentwrap.utils import logging_config


@pytest.fixture(autouse=True)
def _restore_loggers():
    """Leaves the package loggers as it found them."""
    main = logging.getLogger("commentwrap")
    trace = logging.getLogger("commentwrap.transitions")
    saved = (list(main.handlers), main.level, list(trace.handlers), trace.disabled, trace.propagate)
    yield
    for handler in main.handlers + trace.handlers:
        handler.close()
    main.handlers, main.level = saved[0], saved[1]
    trace.handlers, trace.disabled, trace.propagate = saved[2], saved[3], saved[4]


def test_setup_logging_creates_handlers(tmp_path, monkeypatch) -> None:
    """`setup_logging` should add rotating file handlers with proper levels.

    Scenario:
    - Console logging is disabled.
    - Separate error log is requested.
    - File handler level is INFO.

    Assertions:
    - A main rotating file handler and a separate error rotating file
      handler are attached to the "commentwrap" logger, and nothing else.
    - Handler levels match the configuration.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(logging_config.TRACE_ENV_VAR, raising=False)

    logging_config.setup_logging(
        {
            "logging": {
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": False,
                "separate_error_log": True,
            }
        }
    )

    main = logging.getLogger("commentwrap")
    names = {type(h).__name__ for h in main.handlers}

    assert "RotatingFileHandler" in names
    assert len(main.handlers) == 2
    assert main.handlers[0].level == logging.INFO
    assert main.handlers[1].level == logging.ERROR
    assert (tmp_path / "commentwrap.log").exists()
    assert (tmp_path / "commentwrap-error.log").exists()


def test_setup_logging_is_idempotent(tmp_path, monkeypatch) -> None:
    """Calling `setup_logging` twice never duplicates handlers."""
    monkeypatch.chdir(tmp_path)
    config = {"logging": {"console_level": "INFO"}}

    logging_config.setup_logging(config)
    logging_config.setup_logging(config)

    main = logging.getLogger("commentwrap")
    # File + console.
    assert len(main.handlers) == 2
    console = [h for h in main.handlers if type(h) is logging.StreamHandler]
    assert console and console[0].level == logging.INFO


def test_transition_trace_disabled_by_default(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(logging_config.TRACE_ENV_VAR, raising=False)

    logging_config.setup_logging({"logging": {"log_to_console": False}})

    assert logging_config.TRANSITION_LOGGER.disabled
    assert not (tmp_path / "transitions.log").exists()


def test_transition_trace_enabled_by_env(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(logging_config.TRACE_ENV_VAR, "1")

    logging_config.setup_logging({"logging": {"log_to_console": False}})
    logging_config.TRANSITION_LOGGER.debug("buffer=1 - -> in_comment")

    assert not logging_config.TRANSITION_LOGGER.disabled
    for handler in logging_config.TRANSITION_LOGGER.handlers:
        handler.flush()
    assert "in_comment" in (tmp_path / "transitions.log").read_text(encoding="utf-8")
