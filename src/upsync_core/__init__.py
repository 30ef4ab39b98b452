"""
Upsync Core Layer.

Bottom layer in dependency hierarchy. Contains:
- Exception hierarchy
- Configuration management
- Logging service
- Byte-bounded chunking

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from .chunking import Utf8Chunker, byte_length, iter_chunks
from .config import (
    DEFAULT_MAX_CHUNK_BYTES,
    DEFAULT_STORAGE_KEY,
    UpsyncSettings,
    get_config_summary,
    validate_configuration,
)
from .exceptions import (
    ActionNotAllowedError,
    BackendError,
    ConnectionError,
    EndpointNotAllowedError,
    TimeoutError,
    UpsyncError,
    ValidationError,
)
from .logging_service import LoggingConfig, LoggingService

__all__ = [
    # Config
    "UpsyncSettings",
    "DEFAULT_MAX_CHUNK_BYTES",
    "DEFAULT_STORAGE_KEY",
    "get_config_summary",
    "validate_configuration",
    # Exceptions
    "UpsyncError",
    "ValidationError",
    "EndpointNotAllowedError",
    "ActionNotAllowedError",
    "BackendError",
    "ConnectionError",
    "TimeoutError",
    # Logging
    "LoggingService",
    "LoggingConfig",
    # Chunking
    "Utf8Chunker",
    "byte_length",
    "iter_chunks",
]
