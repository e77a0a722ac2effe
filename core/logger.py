"""Centralized logging utility with colored console output."""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


_loggers: dict[str, logging.Logger] = {}


def _level_from_env() -> int:
    """Resolve the default level from STUDIO_LOG_LEVEL (e.g. "DEBUG")."""
    name = os.getenv("STUDIO_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get or create a logger with colored console output.

    Args:
        name: Logger name (typically __name__ of calling module).
        level: Optional logging level. Defaults to STUDIO_LOG_LEVEL or INFO.

    Returns:
        Configured logger instance.
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(level or _level_from_env())

    if not logger.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    # pytest's caplog hooks the root logger, keep records flowing there
    logger.propagate = True
    _loggers[name] = logger
    return logger
