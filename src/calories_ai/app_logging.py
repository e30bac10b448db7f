"""Logging configuration helpers."""

import logging

APP_LOGGER_NAME = "calories_ai"
LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Set up the ``calories_ai`` logger and return it.

    ``level`` accepts a number or a level name such as ``"DEBUG"``. Repeated
    calls only update the level; the stream handler is installed once.
    """
    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
