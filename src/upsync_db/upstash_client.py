"""
UpstashChunkClient - Chunked document storage on the Upstash Redis REST API.

Stores one logical document as a count key plus N indexed chunk keys so that
documents larger than the store's per-value limit can be persisted. Talks to
the store directly or through the forwarding proxy (upsync_proxy) when a
proxy URL is configured.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse

import httpx
import structlog

from upsync_core.chunking import byte_length, iter_chunks
from upsync_core.config import DEFAULT_MAX_CHUNK_BYTES, UpsyncSettings
from upsync_core.exceptions import BackendError, ConnectionError, TimeoutError, ValidationError
from upsync_db.models import ChunkSet, encode_set_body

logger = structlog.get_logger(__name__)

DEFAULT_PROXY_PATH_PREFIX = "/api/upstash"


class UpstashChunkClient:
    """
    Chunked key-value client for one logical document.

    Attributes:
        endpoint: Upstash REST endpoint (e.g., "https://abc.upstash.io")
        chunk_set: Key layout for the document
        proxy_url: Forwarding proxy origin, or None for direct calls
        max_chunk_bytes: UTF-8 byte budget per stored chunk
        client: Async HTTP client

    Example:
        ```python
        async with UpstashChunkClient(
            endpoint="https://abc.upstash.io",
            api_key="AX...",
            base_key="alice",
        ) as client:
            await client.set(large_json_blob)
            restored = await client.get()
        ```
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        base_key: Optional[str] = None,
        proxy_url: Optional[str] = None,
        max_chunk_bytes: int = DEFAULT_MAX_CHUNK_BYTES,
        timeout: float = 30.0,
        proxy_path_prefix: str = DEFAULT_PROXY_PATH_PREFIX,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize UpstashChunkClient.

        Args:
            endpoint: Upstash REST endpoint URL
            api_key: Upstash REST bearer token
            base_key: Document key (default: "chatgpt-next-web")
            proxy_url: Proxy origin; when set, every call goes through the proxy
            max_chunk_bytes: Byte budget per chunk (default: 900 KB)
            timeout: HTTP timeout in seconds (ignored for injected clients)
            proxy_path_prefix: Path of the proxy's forwarding route
            http_client: Pre-built httpx.AsyncClient (caller keeps ownership)

        Raises:
            ValidationError: If endpoint, max_chunk_bytes or timeout are invalid
        """
        parsed = urlparse(endpoint or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(
                message=f"Invalid endpoint: {endpoint!r}",
                error_code="VAL_004",
                details={"endpoint": endpoint},
            )

        if max_chunk_bytes <= 0:
            raise ValidationError(
                message=f"max_chunk_bytes must be positive, got {max_chunk_bytes}",
                error_code="VAL_003",
                details={"max_chunk_bytes": max_chunk_bytes},
            )

        if timeout <= 0:
            raise ValidationError(
                message=f"timeout must be positive, got {timeout}",
                error_code="VAL_003",
                details={"timeout": timeout},
            )

        self.endpoint = endpoint.rstrip("/")
        self.chunk_set = ChunkSet.for_key(base_key)
        self.proxy_url = proxy_url.rstrip("/") if proxy_url else None
        self.proxy_path_prefix = "/" + proxy_path_prefix.strip("/")
        self.max_chunk_bytes = max_chunk_bytes
        self.timeout = timeout
        self._api_key = api_key

        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

        logger.info(
            "upstash_client_initialized",
            endpoint=self.endpoint,
            base_key=self.chunk_set.base_key,
            via_proxy=self.proxy_url is not None,
            max_chunk_bytes=max_chunk_bytes,
        )

    @classmethod
    def from_settings(
        cls,
        settings: UpsyncSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "UpstashChunkClient":
        """Build a client from UpsyncSettings."""
        api_key = settings.upstash_api_key.get_secret_value() if settings.upstash_api_key else ""
        return cls(
            endpoint=settings.upstash_endpoint,
            api_key=api_key,
            base_key=settings.base_key,
            proxy_url=settings.effective_proxy_url,
            max_chunk_bytes=settings.max_chunk_bytes,
            timeout=settings.http_timeout,
            proxy_path_prefix=settings.proxy_path_prefix,
            http_client=http_client,
        )

    @property
    def base_key(self) -> str:
        return self.chunk_set.base_key

    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }

    def path(self, segment: str) -> str:
        """
        Build the request URL for a store path such as "get/<key>".

        Direct mode targets the store itself. Proxy mode targets the proxy's
        forwarding route and passes the real endpoint as a query parameter.
        """
        seg = segment.strip("/")
        if self.proxy_url is None:
            return f"{self.endpoint}/{seg}"
        return (
            f"{self.proxy_url}{self.proxy_path_prefix}/{seg}"
            f"?endpoint={quote(self.endpoint, safe='')}"
        )

    async def check(self) -> bool:
        """
        Probe the store by reading the base key.

        Returns:
            True if the store answered with a 2xx status, False on any failure
        """
        url = self.path(f"get/{quote(self.base_key, safe='')}")
        try:
            response = await self.client.get(url, headers=self.headers())
            logger.info(
                "upstash_check",
                status_code=response.status_code,
                reason=response.reason_phrase,
                url=url,
            )
            return response.is_success
        except Exception as e:
            logger.error("upstash_check_failed", url=url, error=str(e), error_type=type(e).__name__)
            return False

    async def redis_get(self, key: str) -> str:
        """
        Read one key.

        Returns:
            The stored string, or "" if the key holds no string value

        Raises:
            BackendError: On non-2xx status or malformed response
            ConnectionError: If the store/proxy is unreachable
            TimeoutError: If the request times out
        """
        url = self.path(f"get/{quote(key, safe='')}")
        response = await self._send("GET", url, key=key)

        logger.debug("upstash_get", key=key, status_code=response.status_code, url=url)

        if not response.is_success:
            raise self._backend_error("GET", key, response)

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise BackendError(
                message=f"GET {key} returned invalid JSON",
                status_code=response.status_code,
                status_text=response.reason_phrase,
                body=response.text[:500],
                original_exception=e,
            )

        result = payload.get("result") if isinstance(payload, dict) else None
        value = result if isinstance(result, str) else ""
        logger.debug(
            "upstash_get_result",
            key=key,
            char_length=len(value),
            byte_length=byte_length(value),
        )
        return value

    async def redis_set(self, key: str, value: str) -> None:
        """
        Write one key.

        Raises:
            BackendError: On non-2xx status
            ConnectionError: If the store/proxy is unreachable
            TimeoutError: If the request times out
        """
        url = self.path(f"set/{quote(key, safe='')}")
        response = await self._send(
            "POST",
            url,
            key=key,
            content=encode_set_body(value),
            headers={"Content-Type": "application/json; charset=utf-8"},
        )

        logger.debug(
            "upstash_set",
            key=key,
            char_length=len(value),
            byte_length=byte_length(value),
            status_code=response.status_code,
            url=url,
        )

        if not response.is_success:
            raise self._backend_error("SET", key, response)

    async def get(self) -> str:
        """
        Read the whole document.

        Reads the count key, then every chunk concurrently, and joins the
        chunks in index order. A missing or invalid count means there is no
        document yet and yields "".

        Raises:
            BackendError, ConnectionError, TimeoutError: If any read fails
        """
        raw_count = await self.redis_get(self.chunk_set.count_key)
        count = ChunkSet.parse_count(raw_count)

        if count <= 0:
            logger.warning("invalid_chunk_count", base_key=self.base_key, raw_count=raw_count[:32])
            return ""

        keys = self.chunk_set.chunk_keys(count)
        logger.info("upstash_get_document", base_key=self.base_key, chunk_count=count)

        tasks = [asyncio.ensure_future(self.redis_get(k)) for k in keys]
        try:
            parts: List[str] = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        document = "".join(parts)
        logger.info(
            "upstash_document_read",
            base_key=self.base_key,
            chunk_count=count,
            char_length=len(document),
            byte_length=byte_length(document),
        )
        return document

    async def set(self, value: str) -> None:
        """
        Write the whole document.

        All chunks are computed before anything is written. Chunks are then
        written one at a time in index order and the count key goes last, so
        a failed write leaves the previous count (and document) in place.

        Raises:
            ValidationError: If value is not a string
            BackendError, ConnectionError, TimeoutError: If any write fails
        """
        if not isinstance(value, str):
            raise ValidationError(
                message=f"value must be a string, got {type(value).__name__}",
                error_code="VAL_002",
                details={"type": type(value).__name__},
            )

        parts = list(iter_chunks(value, self.max_chunk_bytes))
        logger.info(
            "upstash_set_document",
            base_key=self.base_key,
            chunk_count=len(parts),
            byte_length=byte_length(value),
        )

        for index, part in enumerate(parts):
            await self.redis_set(self.chunk_set.chunk_key(index), part)

        await self.redis_set(self.chunk_set.count_key, str(len(parts)))
        logger.info(
            "upstash_document_written",
            count_key=self.chunk_set.count_key,
            chunk_count=len(parts),
        )

    async def _send(self, method: str, url: str, key: str, **kwargs: Any) -> httpx.Response:
        """Issue one HTTP call, mapping transport failures to Upsync exceptions."""
        headers = self.headers()
        headers.update(kwargs.pop("headers", {}))

        try:
            return await self.client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise TimeoutError(
                message=f"{method} {key} timed out",
                details={"key": key, "url": url},
                original_exception=e,
            )
        except httpx.TransportError as e:
            raise ConnectionError(
                message=f"{method} {key} failed: {e}",
                details={"key": key, "url": url, "error": str(e)},
                original_exception=e,
            )

    @staticmethod
    def _backend_error(operation: str, key: str, response: httpx.Response) -> BackendError:
        body = response.text
        return BackendError(
            message=(
                f"[Upstash] {operation} {key} failed: "
                f"{response.status_code} {response.reason_phrase} {body}"
            ).rstrip(),
            status_code=response.status_code,
            status_text=response.reason_phrase,
            body=body,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "UpstashChunkClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
