"""
Unit test fixtures.

Isolates unit tests from environment variables (.env file)
to ensure tests verify actual default values.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import os

import pytest


# Environment variables that affect UpsyncSettings / ProxyConfig defaults
CONFIG_ENV_VARS = [
    "UPSTASH_ENDPOINT",
    "UPSTASH_API_KEY",
    "UPSTASH_USERNAME",
    "STORAGE_KEY",
    "USE_PROXY",
    "PROXY_URL",
    "PROXY_PATH_PREFIX",
    "MAX_CHUNK_BYTES",
    "HTTP_TIMEOUT",
    "TRUSTED_DOMAIN_SUFFIX",
    "PROXY_HOST",
    "PROXY_PORT",
    "PROXY_CORS_ORIGINS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "UPSYNC_PROXY_HOST",
    "UPSYNC_PROXY_PORT",
    "UPSYNC_PROXY_CORS_ORIGINS",
    "UPSYNC_PROXY_ROUTE_PREFIX",
    "UPSYNC_PROXY_TRUSTED_SUFFIX",
    "UPSYNC_PROXY_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_env_for_unit_tests(monkeypatch, tmp_path):
    """
    Remove all config-related environment variables and change working
    directory to avoid loading .env file.

    This ensures unit tests verify actual default values, not values
    from .env file or system environment.
    """
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    # Change to temp directory to avoid loading .env from project root
    original_dir = os.getcwd()
    os.chdir(tmp_path)
    yield
    os.chdir(original_dir)
