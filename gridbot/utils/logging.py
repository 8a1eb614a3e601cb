"""Structured logging configuration."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

# Third-party loggers that are only interesting while debugging
_NOISY = ("uvicorn.access", "httpx", "asyncio")


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure root logger with a clean format for engine output."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(numeric_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d [%(levelname)-5s] %(name)-30s | %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    quiet_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY:
        logging.getLogger(name).setLevel(quiet_level)
