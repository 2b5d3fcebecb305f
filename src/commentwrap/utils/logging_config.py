# commentwrap/utils/logging_config.py
"""commentwrap.utils.logging_config
==================================

This module provides the logging configuration utility for commentwrap.
It defines the global logger objects and a single setup function,
`setup_logging`, which configures handlers and log levels from a supplied
configuration dictionary.

Features:
    - Rotating file logging for general events (commentwrap.log).
    - Optional console logging to stderr with configurable log level.
    - Optional separate error log file (commentwrap-error.log) for ERROR and CRITICAL events.
    - Optional context-transition tracing (transitions.log) enabled via the
      COMMENTWRAP_TRACE environment variable.
    - Safe reconfiguration: clears existing handlers to avoid duplicate logs when called multiple times.
    - Never raises exceptions; all errors are reported to stderr and logging continues with best-effort.

Usage:
    Editors embedding commentwrap usually own logging themselves. Standalone
    hosts call `setup_logging()` once at startup:

    >>> from commentwrap.utils import logging_config
    >>> logging_config.setup_logging({"logging": {"console_level": "INFO"}})

Globals:
    logger: Main logger ("commentwrap").
    TRANSITION_LOGGER: Logger for context transitions ("commentwrap.transitions").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
# Created at import-time, unconfigured until ``setup_logging()`` runs.
logger = logging.getLogger("commentwrap")
TRANSITION_LOGGER = logging.getLogger("commentwrap.transitions")

TRACE_ENV_VAR = "COMMENTWRAP_TRACE"


def _rotating_handler(
    filename: str, max_bytes: int, backups: int
) -> logging.handlers.RotatingFileHandler:
    log_dir = os.path.dirname(filename)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)
    return logging.handlers.RotatingFileHandler(
        filename, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
    )


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures logging handlers and log levels.

    Up to four independent handlers are set up:

    1. File handler: rotating commentwrap.log capturing everything from
       `file_level` (default DEBUG) upward.
    2. Console handler: optional `stderr` output whose threshold is
       `console_level` (default WARNING).
    3. Error-file handler: optional rotating commentwrap-error.log that
       stores only ERROR and CRITICAL events.
    4. Transition handler: rotating transitions.log attached to
       ``commentwrap.transitions`` when ``COMMENTWRAP_TRACE`` is set to
       ``1/true/yes``; otherwise that logger is disabled.

    Handlers previously installed on the ``commentwrap`` logger are
    removed first, so repeated calls (e.g. in tests) never duplicate
    records.

    Args:
        config (dict | None): Optional configuration blob. Only the
            ``["logging"]`` sub-section is consulted; recognised keys are:

            - ``file`` (str): Path of the main log. Default: ``"commentwrap.log"``.
            - ``file_level`` (str): Level for the main log. Default: ``"DEBUG"``.
            - ``console_level`` (str): Level for console output. Default: ``"WARNING"``.
            - ``log_to_console`` (bool): Enable the console handler. Default: ``True``.
            - ``separate_error_log`` (bool): Create the error log. Default: ``False``.

    Notes:
        The function never raises; I/O or permission errors are reported
        to stderr and logging continues with a best-effort configuration.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {}) or {}

    log_filename = logging_config.get("file", "commentwrap.log")
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-24s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5)
    except OSError as e_fh:
        print(f"Error setting up file logger for '{log_filename}': {e_fh}", file=sys.stderr)
        log_filename = os.path.join(tempfile.gettempdir(), "commentwrap.log")
        print(f"Logging to temporary file: '{log_filename}'", file=sys.stderr)
        try:
            file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5)
        except OSError as e_tmp:
            print(f"File logging disabled: {e_tmp}", file=sys.stderr)
    if file_handler:
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", True):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-24s - %(message)s")
        )
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    # Optional Separate Error Log File
    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_log_filename = "commentwrap-error.log"
        try:
            error_file_handler = _rotating_handler(error_log_filename, 1024 * 1024, 3)
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except OSError as e_efh:
            print(
                f"Error setting up separate error log '{error_log_filename}': {e_efh}.",
                file=sys.stderr,
            )

    logger.handlers = []  # avoid duplicates on reconfiguration
    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            logger.addHandler(handler)
    logger.setLevel(log_file_level)

    # Transition trace logger
    TRANSITION_LOGGER.propagate = False
    TRANSITION_LOGGER.setLevel(logging.DEBUG)
    TRANSITION_LOGGER.handlers = []
    TRANSITION_LOGGER.disabled = False

    if os.environ.get(TRACE_ENV_VAR, "").lower() in {"1", "true", "yes"}:
        try:
            trace_handler = _rotating_handler("transitions.log", 1024 * 1024, 3)
            trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            TRANSITION_LOGGER.addHandler(trace_handler)
            logger.info("Transition tracing enabled, logging to 'transitions.log'.")
        except OSError as e_trace:
            logger.error(f"Failed to set up transition tracing: {e_trace}", exc_info=True)
            TRANSITION_LOGGER.disabled = True
    else:
        TRANSITION_LOGGER.addHandler(logging.NullHandler())
        TRANSITION_LOGGER.disabled = True
        logger.debug("Transition tracing is disabled.")

    logger.info("Logging setup complete. Level: %s.", logging.getLevelName(logger.level))
    if file_handler:
        logger.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )
