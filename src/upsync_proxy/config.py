"""
Configuration for the Upsync forwarding proxy.

ProxyConfig mirrors the server-related fields of UpsyncSettings as a plain
dataclass so the proxy app can be built without touching the environment
(tests, embedding into another ASGI app).

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import os
from dataclasses import dataclass, field
from typing import List

from upsync_core.config import UpsyncSettings
from upsync_core.exceptions import ValidationError

DEFAULT_ROUTE_PREFIX = "/api/upstash"
DEFAULT_TRUSTED_SUFFIX = ".upstash.io"


@dataclass
class ProxyConfig:
    """
    Configuration for the forwarding proxy.

    Attributes:
        host: Bind address (default: 127.0.0.1 for local only)
        port: HTTP port (default: 8787)
        cors_origins: List of allowed CORS origins (default: ["*"])
        route_prefix: Path prefix of the forwarding route (default: /api/upstash)
        trusted_domain_suffix: Hostname suffix upstream endpoints must end with
        upstream_timeout: Timeout for the upstream call in seconds (default: 30)
    """

    host: str = "127.0.0.1"
    port: int = 8787
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    route_prefix: str = DEFAULT_ROUTE_PREFIX
    trusted_domain_suffix: str = DEFAULT_TRUSTED_SUFFIX
    upstream_timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 1 <= self.port <= 65535:
            raise ValidationError(f"port must be between 1 and 65535, got {self.port}")

        if not self.route_prefix.startswith("/"):
            raise ValidationError(f"route_prefix must start with '/', got '{self.route_prefix}'")
        self.route_prefix = self.route_prefix.rstrip("/")

        if not self.trusted_domain_suffix.startswith(".") or len(self.trusted_domain_suffix) < 3:
            raise ValidationError(
                f"trusted_domain_suffix must be a dot-anchored domain such as '.upstash.io', "
                f"got '{self.trusted_domain_suffix}'"
            )
        self.trusted_domain_suffix = self.trusted_domain_suffix.lower()

        if self.upstream_timeout <= 0:
            raise ValidationError(
                f"upstream_timeout must be positive, got {self.upstream_timeout}"
            )

    @classmethod
    def from_env(cls) -> "ProxyConfig":
        """
        Create ProxyConfig from environment variables.

        Environment Variables:
            UPSYNC_PROXY_HOST: Bind address (default: 127.0.0.1)
            UPSYNC_PROXY_PORT: Port (default: 8787)
            UPSYNC_PROXY_CORS_ORIGINS: Comma-separated CORS origins (default: *)
            UPSYNC_PROXY_ROUTE_PREFIX: Forwarding route prefix (default: /api/upstash)
            UPSYNC_PROXY_TRUSTED_SUFFIX: Trusted upstream suffix (default: .upstash.io)
            UPSYNC_PROXY_TIMEOUT: Upstream timeout in seconds (default: 30)

        Returns:
            ProxyConfig instance populated from environment variables
        """
        cors_origins_str = os.getenv("UPSYNC_PROXY_CORS_ORIGINS", "*")
        cors_origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]

        return cls(
            host=os.getenv("UPSYNC_PROXY_HOST", "127.0.0.1"),
            port=int(os.getenv("UPSYNC_PROXY_PORT", "8787")),
            cors_origins=cors_origins or ["*"],
            route_prefix=os.getenv("UPSYNC_PROXY_ROUTE_PREFIX", DEFAULT_ROUTE_PREFIX),
            trusted_domain_suffix=os.getenv("UPSYNC_PROXY_TRUSTED_SUFFIX", DEFAULT_TRUSTED_SUFFIX),
            upstream_timeout=float(os.getenv("UPSYNC_PROXY_TIMEOUT", "30")),
        )

    @classmethod
    def from_settings(cls, settings: UpsyncSettings) -> "ProxyConfig":
        """Create ProxyConfig from UpsyncSettings."""
        return cls(
            host=settings.proxy_host,
            port=settings.proxy_port,
            cors_origins=settings.cors_origins_list or ["*"],
            route_prefix=settings.proxy_path_prefix,
            trusted_domain_suffix=settings.trusted_domain_suffix,
            upstream_timeout=settings.http_timeout,
        )


__all__ = ["ProxyConfig", "DEFAULT_ROUTE_PREFIX", "DEFAULT_TRUSTED_SUFFIX"]
