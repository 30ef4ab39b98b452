"""
Entry point for the Upsync forwarding proxy.

This module serves as the main entry point when running:
    python -m upsync_proxy
    upsync-proxy

Usage:
    python -m upsync_proxy                              # 127.0.0.1:8787
    python -m upsync_proxy --host 0.0.0.0 --port 9000   # Custom host/port
    python -m upsync_proxy --cors-origins https://chat.example.com

The initialization sequence is:
1. Parse command-line arguments
2. Configure logging service
3. Load ProxyConfig from environment and apply CLI overrides
4. Serve the Starlette app with uvicorn

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import argparse
import asyncio
import dataclasses
import sys
from typing import List, Optional

import structlog

from upsync_core.exceptions import UpsyncError
from upsync_core.logging_service import LoggingService
from upsync_core.utils.logger_factory import configure_logging
from upsync_proxy.config import ProxyConfig

logger = structlog.get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="upsync-proxy",
        description="Upsync forwarding proxy for the Upstash Redis REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  UPSYNC_PROXY_HOST            Bind address (default: 127.0.0.1)
  UPSYNC_PROXY_PORT            Port (default: 8787)
  UPSYNC_PROXY_CORS_ORIGINS    Comma-separated CORS origins (default: *)
  UPSYNC_PROXY_ROUTE_PREFIX    Forwarding route prefix (default: /api/upstash)
  UPSYNC_PROXY_TRUSTED_SUFFIX  Trusted upstream suffix (default: .upstash.io)
  UPSYNC_PROXY_TIMEOUT         Upstream timeout in seconds (default: 30)
  LOG_LEVEL                    Log level (default: INFO)
  LOG_FORMAT                   json or console (default: json)
        """,
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Bind address (default: 127.0.0.1, or UPSYNC_PROXY_HOST env var)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port (default: 8787, or UPSYNC_PROXY_PORT env var)",
    )

    parser.add_argument(
        "--cors-origins",
        default=None,
        help="Comma-separated CORS origins (default: *, or UPSYNC_PROXY_CORS_ORIGINS env var)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        type=str.upper,
        help="Log level (default: INFO, or LOG_LEVEL env var)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ProxyConfig:
    """Load ProxyConfig from the environment and apply CLI overrides."""
    config = ProxyConfig.from_env()

    overrides = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.cors_origins is not None:
        overrides["cors_origins"] = [
            origin.strip() for origin in args.cors_origins.split(",") if origin.strip()
        ] or ["*"]

    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


async def main(args: argparse.Namespace) -> None:
    """
    Serve the proxy until interrupted.

    Args:
        args: Parsed command-line arguments
    """
    import uvicorn

    from upsync_proxy.proxy_app import create_proxy_app

    config = build_config(args)
    app = create_proxy_app(config)

    logger.info(
        "Starting Upsync proxy",
        host=config.host,
        port=config.port,
        route_prefix=config.route_prefix,
        cors_origins=config.cors_origins,
    )

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=(args.log_level or "INFO").lower(),
    )
    server = uvicorn.Server(uvicorn_config)

    try:
        await server.serve()
    except Exception as e:
        logger.error("Proxy server error", error=str(e), error_type=type(e).__name__)
        raise


def run(argv: Optional[List[str]] = None) -> None:
    """Console-script entry point."""
    args = parse_args(argv)

    if not LoggingService.is_configured():
        try:
            configure_logging(level=args.log_level)
        except ValueError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            sys.exit(2)

    try:
        asyncio.run(main(args))
    except (UpsyncError, ValueError) as e:
        logger.error("Configuration error", error=str(e), error_type=type(e).__name__)
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down")
        sys.exit(0)


if __name__ == "__main__":
    run()
