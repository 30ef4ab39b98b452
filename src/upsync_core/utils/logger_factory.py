"""
Logger Factory - logging setup for entry points.

Fills in whatever the caller does not pass from UpsyncSettings, so the proxy
and CLI honour LOG_LEVEL / LOG_FORMAT from the environment or .env.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from typing import Optional

from upsync_core.config import UpsyncSettings
from upsync_core.logging_service import LoggingService


def configure_logging(
    level: Optional[str] = None,
    format: Optional[str] = None,
    settings: Optional[UpsyncSettings] = None,
) -> None:
    """
    Configure structured logging from explicit values and settings.

    Raises:
        ValueError: If level or format is invalid
        RuntimeError: If called after logging already configured
    """
    if level is None or format is None:
        settings = settings or UpsyncSettings()
        level = level or settings.log_level
        format = format or settings.log_format

    LoggingService.configure_logging(level=level, format=format)
