"""Logging configuration for the command-line entry point."""

from __future__ import annotations

import logging
from typing import Optional, TextIO

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
ROOT_LOGGER = "saleslog"


def configure(level: str = "WARNING", stream: Optional[TextIO] = None) -> logging.Logger:
    """Attach a single console handler to the ``saleslog`` logger.

    Safe to call more than once; previous handlers are replaced.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
