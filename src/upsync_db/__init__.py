"""
upsync_db - Storage layer for Upsync.

Provides the chunked Upstash REST client and the ChunkSet key layout.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from upsync_db.models import ChunkSet, encode_set_body
from upsync_db.upstash_client import DEFAULT_PROXY_PATH_PREFIX, UpstashChunkClient

__all__ = [
    "ChunkSet",
    "encode_set_body",
    "UpstashChunkClient",
    "DEFAULT_PROXY_PATH_PREFIX",
]
