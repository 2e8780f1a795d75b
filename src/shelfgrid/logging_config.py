"""Logger setup for the ``shelfgrid`` namespace.

Library modules only create loggers; handlers are attached here, by the CLI
or by an embedding application.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional


LOGGER_NAME = "shelfgrid"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: int | str) -> int:
    """Translate a level name (``"debug"``, ``"INFO"``) or number into a logging level."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'")
    return resolved


def setup_logging(level: int | str = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``shelfgrid`` logger with a stderr handler and an optional file handler."""

    numeric_level = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    # Re-running setup (tests, repeated CLI calls) must not stack handlers.
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialised at level %s", logging.getLevelName(numeric_level))
    return logger


__all__ = ["LOGGER_NAME", "LOG_FORMAT", "resolve_level", "setup_logging"]
