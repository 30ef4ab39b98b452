"""
Utility helpers for upsync_core.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from .logger_factory import configure_logging

__all__ = ["configure_logging"]
