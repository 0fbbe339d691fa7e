"""Centralized logging helpers.

Configures the root logger once from the environment and offers small helpers
for structured DEBUG records so call sites stay terse.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from constants import Constants

_DEFAULT_LEVEL = "WARNING"


def configure_logging(level: Optional[str] = None, logfile: Optional[str] = None) -> None:
    """Configure the root logger.

    Args:
        level: Level name; falls back to ``LOCKDEDUPE_LOG_LEVEL`` then WARNING.
        logfile: Optional log file; falls back to ``LOCKDEDUPE_LOG_FILE``.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or _DEFAULT_LEVEL).upper()
    level_value = getattr(logging, level_name, None)
    if not isinstance(level_value, int):
        level_value = logging.WARNING

    logfile = logfile or os.environ.get(Constants.ENV_LOG_FILE)
    handler: logging.Handler
    if logfile:
        handler = logging.FileHandler(logfile, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level_value)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping, dropping fields that are None."""
    return {key: value for key, value in fields.items() if value is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)
