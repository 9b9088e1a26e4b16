"""Centralized logging helpers.

All diagnostics go to stderr so that stdout carries only the canonical keysmap.
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

LOG_LEVEL_ENV = "KEYSMAP_LOG_LEVEL"


def _resolve_level(default: str) -> int:
    name = os.environ.get(LOG_LEVEL_ENV, default).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def _replace_handler(root: logging.Logger, tag: str, handler: Optional[logging.Handler]) -> None:
    for old in [h for h in root.handlers if getattr(h, tag, False)]:
        # removeHandler never flushes, so a closed stream left behind is harmless
        root.removeHandler(old)
        if isinstance(old, logging.FileHandler):
            old.close()
    if handler is not None:
        setattr(handler, tag, True)
        root.addHandler(handler)


def configure_logging(default_level: str = Constants.DEFAULT_LOG_LEVEL, log_file: Optional[str] = None) -> None:
    """Configure the root logger; honours KEYSMAP_LOG_LEVEL.

    Repeated calls replace the handlers installed by earlier ones, so the
    stderr handler always targets the current `sys.stderr` and at most one
    log file is open.
    """
    root = logging.getLogger()
    level = _resolve_level(default_level)
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    _replace_handler(root, "_keysmap_handler", handler)
    file_handler = None
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
    _replace_handler(root, "_keysmap_file_handler", file_handler)


def is_debug_enabled(logger: logging.Logger) -> bool:
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an `extra=` payload, dropping None values."""
    return {k: v for k, v in fields.items() if v is not None}


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
