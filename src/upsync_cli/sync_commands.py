"""
Sync commands for the upsync CLI.

Each command takes an open UpstashChunkClient and returns a process exit
code. Store failures surface as UpsyncError and are reported by the caller.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import sys
from pathlib import Path
from typing import Optional, TextIO

import structlog

from upsync_db import UpstashChunkClient

logger = structlog.get_logger(__name__)


async def check_command(client: UpstashChunkClient, out: Optional[TextIO] = None) -> int:
    """
    Probe the store.

    Returns:
        0 if the store (or proxy) answered with a 2xx status, else 1
    """
    out = out or sys.stdout
    ok = await client.check()
    print("ok" if ok else "unreachable", file=out)
    return 0 if ok else 1


async def pull_command(
    client: UpstashChunkClient,
    output: Optional[Path] = None,
    out: Optional[TextIO] = None,
) -> int:
    """
    Read the whole document and write it to ``output`` or stdout.

    An absent document is written as an empty string.
    """
    document = await client.get()

    if output is not None:
        output.write_text(document, encoding="utf-8")
        logger.info("document_pulled", base_key=client.base_key, path=str(output))
    else:
        (out or sys.stdout).write(document)

    return 0


async def push_command(
    client: UpstashChunkClient,
    input_path: Optional[Path] = None,
    stdin: Optional[TextIO] = None,
) -> int:
    """Read the document from ``input_path`` or stdin and store it."""
    if input_path is not None:
        document = input_path.read_text(encoding="utf-8")
    else:
        document = (stdin or sys.stdin).read()

    await client.set(document)
    logger.info("document_pushed", base_key=client.base_key, char_length=len(document))
    return 0
