"""
Upsync CLI entry point.

Usage:
    upsync check
    upsync pull [--output FILE]
    upsync push [--input FILE]
    upsync --key alice --proxy-url https://app.example.com pull
    upsync --help
    upsync --version

Store credentials come from the environment (UPSTASH_ENDPOINT,
UPSTASH_API_KEY) or a .env file in the working directory.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as SettingsValidationError

from upsync_cli import __version__
from upsync_cli.sync_commands import check_command, pull_command, push_command
from upsync_core.config import UpsyncSettings, validate_configuration
from upsync_core.exceptions import UpsyncError
from upsync_core.logging_service import LoggingService
from upsync_db import UpstashChunkClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="upsync", description="Chunked document sync for the Upstash REST API"
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--key", default=None, help="Base key of the document (default: from env)")
    parser.add_argument(
        "--proxy-url", default=None, help="Send store calls through this forwarding proxy"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("check", help="Check that the store is reachable")

    pull_parser = subparsers.add_parser("pull", help="Read the stored document")
    pull_parser.add_argument(
        "--output", type=Path, default=None, help="Write to FILE instead of stdout"
    )

    push_parser = subparsers.add_parser("push", help="Store a document")
    push_parser.add_argument(
        "--input", type=Path, default=None, help="Read from FILE instead of stdin"
    )

    return parser


def load_settings(args: argparse.Namespace) -> UpsyncSettings:
    """
    Load settings from the environment and apply CLI overrides.

    Raises:
        pydantic.ValidationError: If a value is invalid
    """
    settings = UpsyncSettings()
    if args.key is not None:
        settings.upstash_username = args.key
    if args.proxy_url is not None:
        settings.proxy_url = args.proxy_url
        settings.use_proxy = True
    return settings


def build_client(settings: UpsyncSettings) -> UpstashChunkClient:
    return UpstashChunkClient.from_settings(settings)


async def run_command(args: argparse.Namespace, settings: UpsyncSettings) -> int:
    async with build_client(settings) as client:
        if args.command == "check":
            return await check_command(client)
        if args.command == "pull":
            return await pull_command(client, output=args.output)
        return await push_command(client, input_path=args.input)


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        settings = load_settings(args)
    except SettingsValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    is_valid, errors = validate_configuration(settings)
    if not is_valid:
        for error in errors:
            print(f"Configuration error: {error}", file=sys.stderr)
        sys.exit(2)

    if not LoggingService.is_configured():
        LoggingService.configure_logging(level=settings.log_level, format=settings.log_format)

    try:
        exit_code = asyncio.run(run_command(args, settings))
    except UpsyncError as e:
        LoggingService.log_error(
            e,
            correlation_id=e.correlation_id,
            context={"command": args.command, **e.details},
            logger_name="upsync.cli",
            include_stack_trace=False,
        )
        print(f"{e.error_code}: {e.message}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
