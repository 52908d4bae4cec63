"""Logging configuration helpers."""

import logging

LOGGER_NAME = "energy_balance"
LOG_FORMAT = "%(levelname)s: %(name)s: [profile=%(profile_id)s] %(message)s"


class ProfileContextFilter(logging.Filter):
    """Fill in ``profile_id`` for records logged without one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "profile_id"):
            record.profile_id = "-"
        return True


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.addFilter(ProfileContextFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
