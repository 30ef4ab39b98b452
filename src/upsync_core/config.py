"""
Configuration Management for Upsync.

Provides centralized, type-safe configuration loading using Pydantic Settings.
Supports environment variables, .env files, and sensible defaults for zero-config operation.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

# Fallback base key when no username is configured
DEFAULT_STORAGE_KEY = "chatgpt-next-web"

# 900 KB keeps each value under Upstash's 1 MB request limit
DEFAULT_MAX_CHUNK_BYTES = 900 * 1024


class UpsyncSettings(BaseSettings):
    """
    Centralized configuration manager for Upsync.

    This class implements the Pydantic Settings pattern to provide:
    - Type-safe configuration loading from environment variables
    - Automatic validation of all configuration parameters
    - Zero-config defaults for the proxy and chunking layer
    - Secure handling of the store's bearer token

    Configuration is loaded with the following priority (highest to lowest):
    1. System environment variables
    2. .env file in working directory
    3. Hardcoded default values

    Example:
        ```python
        from upsync_core.config import UpsyncSettings

        settings = UpsyncSettings()
        print(settings.base_key)  # 'chatgpt-next-web'
        print(settings.max_chunk_bytes)  # 921600
        ```
    """

    # ========================================
    # UPSTASH STORE CONFIGURATION
    # ========================================

    upstash_endpoint: str = Field(
        default="", description="Upstash REST endpoint URL (e.g. https://abc.upstash.io)"
    )

    upstash_api_key: Optional[SecretStr] = Field(
        default=None, description="Upstash REST bearer token"
    )

    upstash_username: str = Field(
        default="", description="Base key for the stored document (empty = storage_key)"
    )

    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY, min_length=1, description="Fallback base key"
    )

    # ========================================
    # CLIENT CONFIGURATION
    # ========================================

    use_proxy: bool = Field(default=False, description="Route store calls through the proxy")

    proxy_url: str = Field(default="", description="Proxy origin (e.g. https://app.example.com)")

    proxy_path_prefix: str = Field(
        default="/api/upstash", description="Path prefix of the proxy's forwarding route"
    )

    max_chunk_bytes: int = Field(
        default=DEFAULT_MAX_CHUNK_BYTES,
        ge=1,
        le=4 * 1024 * 1024,
        description="Maximum UTF-8 byte length of a single stored chunk",
    )

    http_timeout: float = Field(
        default=30.0, gt=0.0, le=600.0, description="HTTP timeout for store/proxy calls in seconds"
    )

    # ========================================
    # PROXY SERVER CONFIGURATION
    # ========================================

    trusted_domain_suffix: str = Field(
        default=".upstash.io", description="Hostname suffix the proxy is allowed to forward to"
    )

    proxy_host: str = Field(default="127.0.0.1", description="Proxy server bind address")

    proxy_port: int = Field(default=8787, ge=1, le=65535, description="Proxy server port")

    proxy_cors_origins: str = Field(
        default="*", description="Comma-separated CORS origins (* for all)"
    )

    # ========================================
    # LOGGING CONFIGURATION
    # ========================================

    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_format: str = Field(default="json", description="Log format (json, console)")

    # ========================================
    # VALIDATORS
    # ========================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate log level is one of allowed values.

        Args:
            v: Log level string (case-insensitive)

        Returns:
            Uppercase log level string

        Raises:
            ValueError: If log level not in allowed values
        """
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got '{v}'")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is json or console (lowercased)."""
        allowed = ["json", "console"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got '{v}'")
        return v_lower

    @field_validator("upstash_endpoint", "proxy_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """
        Validate URL format for optional URL fields.

        Args:
            v: URL string (may be empty)

        Returns:
            URL string with trailing slashes removed

        Raises:
            ValueError: If a non-empty URL doesn't start with http:// or https://
        """
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got '{v}'")
        return v.rstrip("/")

    @field_validator("proxy_path_prefix")
    @classmethod
    def validate_path_prefix(cls, v: str) -> str:
        """Path prefix must be absolute; trailing slash removed."""
        if not v.startswith("/"):
            raise ValueError(f"proxy_path_prefix must start with '/', got '{v}'")
        return v.rstrip("/")

    @field_validator("trusted_domain_suffix")
    @classmethod
    def validate_domain_suffix(cls, v: str) -> str:
        """
        Require a dot-anchored suffix so "evilupstash.io" cannot match ".upstash.io".
        """
        if not v.startswith(".") or len(v) < 3:
            raise ValueError(f"trusted_domain_suffix must start with '.', got '{v}'")
        return v.lower()

    # ========================================
    # COMPUTED PROPERTIES
    # ========================================

    @property
    def base_key(self) -> str:
        """Base key for the document: username, or storage_key when unset."""
        return self.upstash_username or self.storage_key

    @property
    def effective_proxy_url(self) -> Optional[str]:
        """Proxy URL the client should use, or None for direct mode."""
        if self.use_proxy and self.proxy_url:
            return self.proxy_url
        return None

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS origins as a list."""
        return [origin.strip() for origin in self.proxy_cors_origins.split(",") if origin.strip()]

    # ========================================
    # PYDANTIC CONFIGURATION
    # ========================================

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "validate_assignment": True,  # Validate on attribute assignment
        "extra": "forbid",  # Forbid extra fields (strict mode)
    }


# ============================================================
# HELPER FUNCTIONS
# ============================================================


def get_config_summary(settings: UpsyncSettings) -> Dict[str, Any]:
    """
    Get configuration summary for logging/debugging with sensitive values masked.

    Args:
        settings: UpsyncSettings instance

    Returns:
        Configuration summary grouped by category
    """
    return {
        "store": {
            "endpoint": settings.upstash_endpoint,
            "api_key": "[REDACTED]" if settings.upstash_api_key else None,
            "base_key": settings.base_key,
        },
        "client": {
            "use_proxy": settings.use_proxy,
            "proxy_url": settings.proxy_url,
            "proxy_path_prefix": settings.proxy_path_prefix,
            "max_chunk_bytes": settings.max_chunk_bytes,
            "http_timeout": settings.http_timeout,
        },
        "proxy": {
            "host": settings.proxy_host,
            "port": settings.proxy_port,
            "cors_origins": settings.cors_origins_list,
            "trusted_domain_suffix": settings.trusted_domain_suffix,
        },
        "logging": {
            "level": settings.log_level,
            "format": settings.log_format,
        },
    }


def validate_configuration(settings: UpsyncSettings) -> tuple[bool, list[str]]:
    """
    Perform client-side runtime validation beyond Pydantic checks.

    Args:
        settings: UpsyncSettings instance to validate

    Returns:
        Tuple of (is_valid, errors)
        - is_valid: True if configuration is usable by the chunk client
        - errors: List of error messages (empty if valid)
    """
    errors = []

    if not settings.upstash_endpoint:
        errors.append("upstash_endpoint is not configured (UPSTASH_ENDPOINT)")

    if settings.upstash_api_key is None or not settings.upstash_api_key.get_secret_value():
        errors.append("upstash_api_key is not configured (UPSTASH_API_KEY)")

    if settings.use_proxy and not settings.proxy_url:
        errors.append("use_proxy is enabled but proxy_url is empty (PROXY_URL)")

    return (len(errors) == 0, errors)
