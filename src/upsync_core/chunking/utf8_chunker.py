"""
Utf8Chunker implementation.

Splits a document into ordered pieces whose UTF-8 encoded size stays under a
byte budget, so each piece fits in a single value of the remote store. A
character unit (code point plus any combining marks, variation selectors,
emoji modifiers or zero-width-joiner continuations) is never split across two
chunks, so every chunk decodes on its own and concatenating the chunks in
order restores the input exactly.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from __future__ import annotations

import unicodedata
from typing import Iterator, List

import structlog

from upsync_core.config import DEFAULT_MAX_CHUNK_BYTES
from upsync_core.exceptions import ValidationError

logger = structlog.get_logger(__name__)

_ZWJ = "\u200d"
_MARK_CATEGORIES = frozenset({"Mn", "Mc", "Me"})


def byte_length(text: str) -> int:
    """Return the UTF-8 encoded length of text.

    Lone surrogates are counted as 3 bytes instead of raising.
    """
    return len(text.encode("utf-8", "surrogatepass"))


def _is_regional_indicator(ch: str) -> bool:
    return 0x1F1E6 <= ord(ch) <= 0x1F1FF


def _extends_unit(ch: str) -> bool:
    """True if ch attaches to the preceding code point."""
    cp = ord(ch)
    if ch == _ZWJ:
        return True
    if 0xFE00 <= cp <= 0xFE0F:  # variation selectors
        return True
    if 0x1F3FB <= cp <= 0x1F3FF:  # skin tone modifiers
        return True
    if 0xE0020 <= cp <= 0xE007F:  # emoji tag sequences
        return True
    return unicodedata.category(ch) in _MARK_CATEGORIES


def _validate_max_bytes(max_bytes: int) -> None:
    if isinstance(max_bytes, bool) or not isinstance(max_bytes, int) or max_bytes <= 0:
        raise ValidationError(
            message=f"max_bytes must be a positive integer, got {max_bytes!r}",
            error_code="VAL_003",
            details={"max_bytes": max_bytes},
        )


def iter_units(text: str) -> Iterator[str]:
    """
    Iterate text by indivisible character units.

    A unit starts at a base code point and absorbs the code points that modify
    it. A zero-width joiner also pulls in the code point that follows it, and
    two regional indicators form one flag.
    """
    buf = ""
    join_next = False

    for ch in text:
        if buf and (
            join_next
            or _extends_unit(ch)
            or (len(buf) == 1 and _is_regional_indicator(buf) and _is_regional_indicator(ch))
        ):
            buf += ch
        else:
            if buf:
                yield buf
            buf = ch
        join_next = ch == _ZWJ

    if buf:
        yield buf


def iter_chunks(text: str, max_bytes: int = DEFAULT_MAX_CHUNK_BYTES) -> Iterator[str]:
    """
    Split text into chunks of at most max_bytes UTF-8 bytes.

    Args:
        text: Document to split (may be empty).
        max_bytes: Byte budget per chunk (default: 900 KB).

    Yields:
        Chunks in document order. A single unit larger than max_bytes is
        emitted as its own over-limit chunk.

    Raises:
        ValidationError: If max_bytes is not a positive integer.
    """
    _validate_max_bytes(max_bytes)

    parts: List[str] = []
    size = 0

    for unit in iter_units(text):
        unit_size = byte_length(unit)

        if parts and size + unit_size > max_bytes:
            yield "".join(parts)
            parts = []
            size = 0

        if unit_size > max_bytes:
            logger.warning("oversized_unit", unit_bytes=unit_size, max_bytes=max_bytes)

        parts.append(unit)
        size += unit_size

    if parts:
        yield "".join(parts)


class Utf8Chunker:
    """
    Byte-bounded chunker bound to a fixed budget.

    Example:
        ```python
        chunker = Utf8Chunker(max_bytes=4)
        chunker.chunk("héllo")  # ['hél', 'lo']
        ```
    """

    def __init__(self, max_bytes: int = DEFAULT_MAX_CHUNK_BYTES) -> None:
        _validate_max_bytes(max_bytes)
        self.max_bytes = max_bytes

    def iter_chunks(self, text: str) -> Iterator[str]:
        return iter_chunks(text, self.max_bytes)

    def chunk(self, text: str) -> List[str]:
        """Return every chunk of text as a list."""
        chunks = list(iter_chunks(text, self.max_bytes))
        logger.debug(
            "document_chunked",
            char_length=len(text),
            byte_length=byte_length(text),
            chunk_count=len(chunks),
            max_bytes=self.max_bytes,
        )
        return chunks
