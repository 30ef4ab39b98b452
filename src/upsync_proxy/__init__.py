"""
Upsync forwarding proxy.

Relays get/set calls for the chunk-store client to the Upstash REST API,
restricted to endpoints under the trusted provider domain.

Note: Imports are lazy so that entry points can configure logging before
the Starlette app module is loaded.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import ProxyConfig
    from .endpoint_validator import build_upstream_url, is_trusted_host, require_endpoint
    from .proxy_app import create_proxy_app


def __getattr__(name: str) -> Any:
    """Lazy import to support deferred initialization."""
    if name == "ProxyConfig":
        from .config import ProxyConfig
        return ProxyConfig
    elif name == "create_proxy_app":
        from .proxy_app import create_proxy_app
        return create_proxy_app
    elif name in ("build_upstream_url", "is_trusted_host", "require_endpoint"):
        from . import endpoint_validator
        return getattr(endpoint_validator, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ProxyConfig",
    "create_proxy_app",
    "build_upstream_url",
    "is_trusted_host",
    "require_endpoint",
]
