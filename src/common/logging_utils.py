"""Logging helpers shared by the gateway, cache and scanner modules.

Log calls use printf-style arguments; structured fields travel in ``extra``
built by :func:`extra_context` so formatters can pick them up.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from constants import Constants


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the root logger.

    Args:
        level: Level name, case-insensitive (e.g. "debug").
        log_file: Optional path; logs go to stderr when omitted.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(log_level)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for a log record, dropping None values."""
    return {key: value for key, value in fields.items() if value is not None}


def safe_url(url: str) -> str:
    """Strip userinfo, query string and fragment from a URL before logging."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, host, parts.path, "", ""))


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, up to now if the block is still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
