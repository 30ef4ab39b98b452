"""
Data models for upsync_db module.

Defines the ChunkSet descriptor that centralizes how a logical document is
laid out in the store's key space (one count key plus N indexed chunk keys),
and the body format of a store write.
"""

import json
import math
from dataclasses import dataclass
from typing import List, Optional

from upsync_core.config import DEFAULT_STORAGE_KEY

COUNT_KEY_SUFFIX = "-chunk-count"
CHUNK_KEY_INFIX = "-chunk-"


def encode_set_body(value: str) -> bytes:
    """
    Encode the body of a store write as ``{"value": "<string>"}``.

    Direct calls and the forwarding proxy both use this, so a key written one
    way reads back the same way through the other.
    """
    return json.dumps({"value": value}, ensure_ascii=False, separators=(",", ":")).encode(
        "utf-8"
    )


@dataclass(frozen=True)
class ChunkSet:
    """
    Key layout for one logical document.

    Attributes:
        base_key: Conceptual document key (username or default storage key)

    Example:
        ```python
        chunk_set = ChunkSet("alice")
        chunk_set.count_key       # 'alice-chunk-count'
        chunk_set.chunk_key(2)    # 'alice-chunk-2'
        chunk_set.chunk_keys(2)   # ['alice-chunk-0', 'alice-chunk-1']
        ```
    """

    base_key: str = DEFAULT_STORAGE_KEY

    def __post_init__(self) -> None:
        if not self.base_key:
            raise ValueError("base_key cannot be empty")

    @classmethod
    def for_key(cls, base_key: Optional[str]) -> "ChunkSet":
        """Build a ChunkSet, falling back to the default storage key."""
        return cls(base_key or DEFAULT_STORAGE_KEY)

    @property
    def count_key(self) -> str:
        return f"{self.base_key}{COUNT_KEY_SUFFIX}"

    def chunk_key(self, index: int) -> str:
        if index < 0:
            raise ValueError(f"chunk index must be >= 0, got {index}")
        return f"{self.base_key}{CHUNK_KEY_INFIX}{index}"

    def chunk_keys(self, count: int) -> List[str]:
        return [self.chunk_key(i) for i in range(max(count, 0))]

    @staticmethod
    def parse_count(raw: Optional[str]) -> int:
        """
        Parse a stored chunk count.

        Missing, non-numeric, fractional and non-positive values all mean
        "no document" and yield 0. Integral floats such as "3.0" are accepted.
        """
        if raw is None:
            return 0

        text = str(raw).strip()
        if not text:
            return 0

        try:
            count = int(text)
        except ValueError:
            try:
                as_float = float(text)
            except ValueError:
                return 0
            if not math.isfinite(as_float) or not as_float.is_integer():
                return 0
            count = int(as_float)

        return count if count > 0 else 0
