"""
Unit tests for UpsyncSettings.

Tests configuration loading, validation, computed properties,
and environment variable handling.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from upsync_core.config import (
    DEFAULT_MAX_CHUNK_BYTES,
    DEFAULT_STORAGE_KEY,
    UpsyncSettings,
    get_config_summary,
    validate_configuration,
)

# ============================================================
# CONFIGURATION LOADING TESTS
# ============================================================


def test_default_configuration():
    """Test that default configuration loads successfully with all defaults."""
    settings = UpsyncSettings()

    # Store defaults
    assert settings.upstash_endpoint == ""
    assert settings.upstash_api_key is None
    assert settings.upstash_username == ""
    assert settings.storage_key == "chatgpt-next-web"

    # Client defaults
    assert settings.use_proxy is False
    assert settings.proxy_url == ""
    assert settings.proxy_path_prefix == "/api/upstash"
    assert settings.max_chunk_bytes == 900 * 1024
    assert settings.http_timeout == 30.0

    # Proxy defaults
    assert settings.trusted_domain_suffix == ".upstash.io"
    assert settings.proxy_host == "127.0.0.1"
    assert settings.proxy_port == 8787
    assert settings.proxy_cors_origins == "*"

    # Logging defaults
    assert settings.log_level == "INFO"
    assert settings.log_format == "json"


def test_constants():
    assert DEFAULT_STORAGE_KEY == "chatgpt-next-web"
    assert DEFAULT_MAX_CHUNK_BYTES == 921600


def test_environment_override(monkeypatch):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("UPSTASH_ENDPOINT", "https://abc.upstash.io/")
    monkeypatch.setenv("UPSTASH_API_KEY", "secret-token")
    monkeypatch.setenv("UPSTASH_USERNAME", "alice")
    monkeypatch.setenv("MAX_CHUNK_BYTES", "1024")
    monkeypatch.setenv("USE_PROXY", "true")
    monkeypatch.setenv("PROXY_URL", "https://app.example.com")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = UpsyncSettings()

    assert settings.upstash_endpoint == "https://abc.upstash.io"
    assert settings.upstash_api_key.get_secret_value() == "secret-token"
    assert settings.base_key == "alice"
    assert settings.max_chunk_bytes == 1024
    assert settings.effective_proxy_url == "https://app.example.com"
    assert settings.log_level == "DEBUG"


def test_env_file_loading(tmp_path: Path, monkeypatch):
    """Test that a .env file in the working directory is read."""
    (tmp_path / ".env").write_text(
        "UPSTASH_ENDPOINT=https://env.upstash.io\nUPSTASH_API_KEY=from-file\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    settings = UpsyncSettings()

    assert settings.upstash_endpoint == "https://env.upstash.io"
    assert settings.upstash_api_key.get_secret_value() == "from-file"


def test_api_key_is_secret():
    settings = UpsyncSettings(upstash_api_key="secret-token")

    assert isinstance(settings.upstash_api_key, SecretStr)
    assert "secret-token" not in repr(settings)


# ============================================================
# VALIDATION TESTS
# ============================================================


@pytest.mark.parametrize("field", ["upstash_endpoint", "proxy_url"])
def test_url_must_be_http(field):
    with pytest.raises(ValidationError):
        UpsyncSettings(**{field: "abc.upstash.io"})


def test_invalid_log_level():
    with pytest.raises(ValidationError):
        UpsyncSettings(log_level="VERBOSE")


def test_invalid_log_format():
    with pytest.raises(ValidationError):
        UpsyncSettings(log_format="xml")


def test_log_format_lowercased():
    assert UpsyncSettings(log_format="CONSOLE").log_format == "console"


@pytest.mark.parametrize("value", [0, -1, 4 * 1024 * 1024 + 1])
def test_chunk_budget_bounds(value):
    with pytest.raises(ValidationError):
        UpsyncSettings(max_chunk_bytes=value)


def test_path_prefix_must_be_absolute():
    with pytest.raises(ValidationError):
        UpsyncSettings(proxy_path_prefix="api/upstash")


def test_path_prefix_trailing_slash_stripped():
    assert UpsyncSettings(proxy_path_prefix="/sync/").proxy_path_prefix == "/sync"


@pytest.mark.parametrize("suffix", ["upstash.io", "io", "."])
def test_trusted_suffix_must_be_dot_anchored(suffix):
    with pytest.raises(ValidationError):
        UpsyncSettings(trusted_domain_suffix=suffix)


def test_trusted_suffix_lowercased():
    settings = UpsyncSettings(trusted_domain_suffix=".Upstash.IO")

    assert settings.trusted_domain_suffix == ".upstash.io"


def test_extra_fields_forbidden():
    with pytest.raises(ValidationError):
        UpsyncSettings(unknown_field=1)


def test_validate_assignment():
    settings = UpsyncSettings()

    with pytest.raises(ValidationError):
        settings.proxy_port = 70000


# ============================================================
# COMPUTED PROPERTIES
# ============================================================


def test_base_key_falls_back_to_storage_key():
    assert UpsyncSettings().base_key == "chatgpt-next-web"
    assert UpsyncSettings(storage_key="shared").base_key == "shared"
    assert UpsyncSettings(upstash_username="bob", storage_key="shared").base_key == "bob"


def test_effective_proxy_url_requires_flag():
    assert UpsyncSettings(proxy_url="https://app.example.com").effective_proxy_url is None
    assert UpsyncSettings(use_proxy=True).effective_proxy_url is None
    assert (
        UpsyncSettings(use_proxy=True, proxy_url="https://app.example.com/").effective_proxy_url
        == "https://app.example.com"
    )


def test_cors_origins_list():
    settings = UpsyncSettings(proxy_cors_origins="https://a.example.com, https://b.example.com,")

    assert settings.cors_origins_list == ["https://a.example.com", "https://b.example.com"]


# ============================================================
# HELPER FUNCTIONS
# ============================================================


def test_config_summary_masks_api_key():
    settings = UpsyncSettings(
        upstash_endpoint="https://abc.upstash.io", upstash_api_key="secret-token"
    )

    summary = get_config_summary(settings)

    assert summary["store"]["api_key"] == "[REDACTED]"
    assert summary["store"]["endpoint"] == "https://abc.upstash.io"
    assert summary["client"]["max_chunk_bytes"] == 921600
    assert summary["proxy"]["cors_origins"] == ["*"]
    assert "secret-token" not in str(summary)


def test_config_summary_without_api_key():
    assert get_config_summary(UpsyncSettings())["store"]["api_key"] is None


def test_validate_configuration_success():
    settings = UpsyncSettings(upstash_endpoint="https://abc.upstash.io", upstash_api_key="t")

    assert validate_configuration(settings) == (True, [])


def test_validate_configuration_missing_values():
    is_valid, errors = validate_configuration(UpsyncSettings(use_proxy=True))

    assert is_valid is False
    assert len(errors) == 3
    assert any("upstash_endpoint" in e for e in errors)
    assert any("upstash_api_key" in e for e in errors)
    assert any("proxy_url" in e for e in errors)


def test_validate_configuration_empty_api_key():
    settings = UpsyncSettings(upstash_endpoint="https://abc.upstash.io", upstash_api_key="")

    is_valid, errors = validate_configuration(settings)

    assert is_valid is False
    assert errors == ["upstash_api_key is not configured (UPSTASH_API_KEY)"]
