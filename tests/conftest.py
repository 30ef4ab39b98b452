"""
Pytest configuration and fixtures for all tests.

Provides shared setup/teardown for logging and an in-memory fake of the
Upstash REST API.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import asyncio
import json
from typing import Dict, List
from urllib.parse import unquote

import httpx
import pytest

from upsync_core.logging_service import LoggingService


def pytest_configure(config):
    """Configure logging before any tests are collected."""
    if not LoggingService.is_configured():
        LoggingService.configure_logging(level="DEBUG", format="json")


@pytest.fixture(autouse=True)
def reset_logging_service():
    """Reset LoggingService state before each test."""
    # Reset class-level state
    LoggingService._configured = False
    LoggingService._config = None

    # Configure for tests
    LoggingService.configure_logging(level="DEBUG", format="json")

    yield

    # Cleanup after test
    LoggingService._configured = False
    LoggingService._config = None


class FakeUpstash:
    """
    In-memory stand-in for the Upstash REST API, served via httpx.MockTransport.

    Stores values under decoded keys. A set call must carry the JSON body
    ``{"value": "<string>"}``, whether it comes from the client directly or
    from the forwarding proxy.
    """

    def __init__(self, token: str = "test-token"):
        self.token = token
        self.data: Dict[str, str] = {}
        self.requests: List[httpx.Request] = []
        self.fail_keys: Dict[str, int] = {}
        self.delays: Dict[str, float] = {}
        self.cancelled: List[str] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def writes(self) -> List[str]:
        """Keys of every set call, in arrival order."""
        keys = []
        for request in self.requests:
            action, key = self._route(request)
            if action == "set":
                keys.append(key)
        return keys

    @staticmethod
    def _route(request: httpx.Request):
        path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        action, _, key = path.lstrip("/").partition("/")
        return action, unquote(key)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"error": "Unauthorized"})

        action, key = self._route(request)

        if key in self.delays:
            try:
                await asyncio.sleep(self.delays[key])
            except asyncio.CancelledError:
                self.cancelled.append(key)
                raise

        if key in self.fail_keys:
            return httpx.Response(self.fail_keys[key], json={"error": "boom"})

        if action == "get" and request.method == "GET":
            return httpx.Response(200, json={"result": self.data.get(key)})

        if action == "set" and request.method == "POST":
            try:
                value = json.loads(request.content)["value"]
            except (ValueError, TypeError, KeyError):
                return httpx.Response(400, json={"error": "ERR body must be {\"value\": ...}"})
            if not isinstance(value, str):
                return httpx.Response(400, json={"error": "ERR value must be a string"})
            self.data[key] = value
            return httpx.Response(200, json={"result": "OK"})

        return httpx.Response(400, json={"error": f"unsupported: {request.method} {action}"})


@pytest.fixture
def fake_upstash():
    """In-memory Upstash store shared by direct and proxied calls."""
    return FakeUpstash()
