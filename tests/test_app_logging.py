"""Tests for logging configuration."""

import io
import logging

from energy_balance.app_logging import LOGGER_NAME, configure_logging


def _fresh_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    return logger


def test_configure_logging_idempotent() -> None:
    logger = _fresh_logger()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.propagate is False


def test_log_lines_carry_profile_context() -> None:
    logger = _fresh_logger()
    configure_logging(logging.DEBUG)
    stream = io.StringIO()
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    handler.setStream(stream)

    child = logging.getLogger(f"{LOGGER_NAME}.services.logs")
    child.info("Logged meal", extra={"profile_id": "abc"})
    child.debug("No profile here")

    lines = stream.getvalue().splitlines()
    assert lines[0].endswith("[profile=abc] Logged meal")
    assert lines[1] == (
        f"DEBUG: {LOGGER_NAME}.services.logs: [profile=-] No profile here"
    )
    logger.handlers.clear()
