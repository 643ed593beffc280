"""The package's own logger.

Messages from setup_logging itself go to the ``setup_logging`` logger and
travel through whatever sinks the application registered. A ``NullHandler``
keeps them silent when nothing is configured.
"""
from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger("setup_logging")
        if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
            logger.addHandler(logging.NullHandler())
        _LOGGER = logger
    return _LOGGER

__all__ = ["get_logger"]
