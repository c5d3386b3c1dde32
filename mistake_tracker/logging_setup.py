"""Loguru sink configuration shared by the API and CLI entry points."""

from __future__ import annotations

import sys

from loguru import logger

from config import Settings

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {name}:{line} | {message}"


def configure_logging(settings: Settings, level: str | None = None) -> None:
    """
    Replace loguru's default sink with the configured ones.

    Args:
        settings: Provides log_level and the optional log_file
        level: Overrides settings.log_level for the stderr sink
    """
    logger.remove()
    logger.add(sys.stderr, level=level or settings.log_level, format=LOG_FORMAT)
    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
