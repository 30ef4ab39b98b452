"""
Endpoint validation for the forwarding proxy.

The proxy only relays to hosts under the trusted provider domain; this check
is what keeps it from being used as an open relay. The match is a plain
suffix match anchored on a leading dot, so "abc.upstash.io" passes while
"upstash.io.evil.com" and "evilupstash.io" do not.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from typing import Iterable, Optional
from urllib.parse import quote, urlparse

from upsync_core.exceptions import EndpointNotAllowedError, ValidationError

TRUSTED_DOMAIN_SUFFIX = ".upstash.io"


def clean_endpoint(endpoint: str) -> str:
    """Strip trailing slashes from an endpoint URL."""
    return endpoint.rstrip("/")


def is_trusted_host(host: Optional[str], trusted_suffix: str = TRUSTED_DOMAIN_SUFFIX) -> bool:
    """
    Allow-list predicate for upstream hostnames.

    Args:
        host: Hostname (no port)
        trusted_suffix: Dot-anchored domain suffix

    Returns:
        True if host ends with trusted_suffix
    """
    if not host:
        return False
    return host.lower().rstrip(".").endswith(trusted_suffix.lower())


def require_endpoint(
    endpoint: Optional[str], trusted_suffix: str = TRUSTED_DOMAIN_SUFFIX
) -> str:
    """
    Validate a caller-supplied upstream endpoint.

    Args:
        endpoint: Value of the ``endpoint`` query parameter
        trusted_suffix: Dot-anchored domain suffix to accept

    Returns:
        The endpoint with trailing slashes removed

    Raises:
        ValidationError: If the endpoint is missing or not a URL (HTTP 400)
        EndpointNotAllowedError: If the host is outside the trusted domain (HTTP 403)
    """
    if endpoint is None or not endpoint.strip():
        raise ValidationError("Missing query param: endpoint", error_code="VAL_001")

    endpoint = endpoint.strip()

    try:
        parsed = urlparse(endpoint)
        host = parsed.hostname
    except ValueError as e:
        raise ValidationError(
            f"Invalid endpoint: {endpoint}",
            error_code="VAL_004",
            details={"endpoint": endpoint},
            original_exception=e,
        )

    if parsed.scheme not in ("http", "https"):
        raise EndpointNotAllowedError(
            f"forbidden endpoint scheme: {parsed.scheme or '(none)'}",
            details={"endpoint": endpoint},
        )

    if not is_trusted_host(host, trusted_suffix):
        raise EndpointNotAllowedError(
            f"forbidden endpoint: {host or endpoint}",
            details={"host": host, "trusted_suffix": trusted_suffix},
        )

    return clean_endpoint(endpoint)


def build_upstream_url(endpoint: str, action: str, key_segments: Iterable[str]) -> str:
    """
    Build ``<endpoint>/<action>/<seg1>/<seg2>...`` with each segment URL-encoded.
    """
    segs = "/".join(quote(seg, safe="") for seg in key_segments)
    return f"{clean_endpoint(endpoint)}/{action}/{segs}"
