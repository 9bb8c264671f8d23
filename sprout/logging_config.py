"""Loguru sink configuration."""
from __future__ import annotations

import sys

from loguru import logger

from sprout.config import get_settings


def configure_logging(level: str | None = None) -> None:
    """Replace the default loguru sinks with a single stderr sink."""

    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or get_settings().LOG_LEVEL).upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
    )
