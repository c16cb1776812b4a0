"""Logging setup: one stderr handler for the ``stackplan`` logger tree."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LEVEL_ENV = "STACKPLAN_LOG_LEVEL"


def _level_from_env(default: int) -> int:
    name = os.environ.get(LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def setup_logging(level: int = logging.WARNING, format_string: Optional[str] = None) -> logging.Logger:
    """
    Configure stderr logging and return the package logger.
    
    ``STACKPLAN_LOG_LEVEL`` (e.g. ``INFO``) overrides ``level``; progress of
    each resource transition is logged at INFO.
    """
    level = _level_from_env(level)
    logging.basicConfig(
        level=level,
        format=format_string or LOG_FORMAT,
        stream=sys.stderr,
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    
    logger = logging.getLogger("stackplan")
    logger.setLevel(level)
    return logger


def set_verbosity(verbose: bool) -> None:
    """Switch the package logger and the root handlers to DEBUG."""
    if not verbose:
        return
    logging.getLogger("stackplan").setLevel(logging.DEBUG)
    for handler in logging.getLogger().handlers:
        handler.setLevel(logging.DEBUG)


def get_logger(name: str) -> logging.Logger:
    """Logger for one area of the package, e.g. ``get_logger("execution.executor")``."""
    return logging.getLogger(f"stackplan.{name}")
