"""
Chunking utilities for upsync_core.

Provides the byte-bounded UTF-8 chunker used to split documents across keys.
"""

from .utf8_chunker import Utf8Chunker, byte_length, iter_chunks, iter_units

__all__ = ["Utf8Chunker", "byte_length", "iter_chunks", "iter_units"]
