"""
Unit tests for ProxyConfig.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import pytest

from upsync_core.config import UpsyncSettings
from upsync_core.exceptions import ValidationError
from upsync_proxy.config import ProxyConfig


@pytest.mark.unit
class TestProxyConfigDefaults:
    """Default values and validation."""

    def test_defaults(self):
        config = ProxyConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 8787
        assert config.cors_origins == ["*"]
        assert config.route_prefix == "/api/upstash"
        assert config.trusted_domain_suffix == ".upstash.io"
        assert config.upstream_timeout == 30.0

    def test_cors_origins_not_shared(self):
        first = ProxyConfig()
        first.cors_origins.append("https://a.example.com")

        assert ProxyConfig().cors_origins == ["*"]

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_invalid_port(self, port):
        with pytest.raises(ValidationError):
            ProxyConfig(port=port)

    def test_route_prefix_must_be_absolute(self):
        with pytest.raises(ValidationError):
            ProxyConfig(route_prefix="api/upstash")

    def test_route_prefix_trailing_slash_stripped(self):
        assert ProxyConfig(route_prefix="/sync/").route_prefix == "/sync"

    @pytest.mark.parametrize("suffix", ["upstash.io", ".", ".i"])
    def test_invalid_suffix(self, suffix):
        with pytest.raises(ValidationError):
            ProxyConfig(trusted_domain_suffix=suffix)

    def test_suffix_lowercased(self):
        assert ProxyConfig(trusted_domain_suffix=".Example.NET").trusted_domain_suffix == (
            ".example.net"
        )

    def test_invalid_timeout(self):
        with pytest.raises(ValidationError):
            ProxyConfig(upstream_timeout=0)


@pytest.mark.unit
class TestProxyConfigFromEnv:
    """Loading from UPSYNC_PROXY_* variables."""

    def test_from_env_defaults(self):
        assert ProxyConfig.from_env() == ProxyConfig()

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("UPSYNC_PROXY_HOST", "0.0.0.0")
        monkeypatch.setenv("UPSYNC_PROXY_PORT", "9000")
        monkeypatch.setenv(
            "UPSYNC_PROXY_CORS_ORIGINS", "https://a.example.com, https://b.example.com"
        )
        monkeypatch.setenv("UPSYNC_PROXY_ROUTE_PREFIX", "/sync")
        monkeypatch.setenv("UPSYNC_PROXY_TRUSTED_SUFFIX", ".example.net")
        monkeypatch.setenv("UPSYNC_PROXY_TIMEOUT", "5")

        config = ProxyConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.cors_origins == ["https://a.example.com", "https://b.example.com"]
        assert config.route_prefix == "/sync"
        assert config.trusted_domain_suffix == ".example.net"
        assert config.upstream_timeout == 5.0

    def test_from_env_empty_cors_falls_back(self, monkeypatch):
        monkeypatch.setenv("UPSYNC_PROXY_CORS_ORIGINS", " , ")

        assert ProxyConfig.from_env().cors_origins == ["*"]

    def test_from_env_invalid_port(self, monkeypatch):
        monkeypatch.setenv("UPSYNC_PROXY_PORT", "not-a-port")

        with pytest.raises(ValueError):
            ProxyConfig.from_env()

    def test_from_settings(self):
        settings = UpsyncSettings(
            proxy_host="0.0.0.0",
            proxy_port=9100,
            proxy_cors_origins="https://a.example.com",
            proxy_path_prefix="/sync",
            trusted_domain_suffix=".example.net",
            http_timeout=12.5,
        )

        config = ProxyConfig.from_settings(settings)

        assert config.host == "0.0.0.0"
        assert config.port == 9100
        assert config.cors_origins == ["https://a.example.com"]
        assert config.route_prefix == "/sync"
        assert config.trusted_domain_suffix == ".example.net"
        assert config.upstream_timeout == 12.5
