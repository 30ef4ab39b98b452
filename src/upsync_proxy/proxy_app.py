"""
Forwarding proxy for the Upstash Redis REST API.

Provides HTTP endpoints that relay exactly two store primitives:
- GET  <prefix>/get/<key...>?endpoint=<url>: read one key
- POST <prefix>/set/<key...>?endpoint=<url>: write one key (JSON {value} or raw text)
  forwarded to the store as {"value": "<string>"}
- POST <prefix>/get/<key...>?endpoint=<url>: read one key (for POST-only callers)
- GET /health: Health check endpoint for monitoring

The caller's Authorization header is relayed as-is and the upstream status and
body come back verbatim. The proxy keeps no state between requests: every
request validates its own endpoint and opens its own upstream connection.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import json
import time
from typing import Dict, List, Optional
from urllib.parse import unquote

import httpx
import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from upsync_core.exceptions import ActionNotAllowedError, UpsyncError, ValidationError
from upsync_db.models import encode_set_body
from upsync_proxy.config import ProxyConfig
from upsync_proxy.endpoint_validator import build_upstream_url, require_endpoint

logger = structlog.get_logger(__name__)

# Server version for health endpoint
__version__ = "0.1.0"

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def error_response(msg: str, status_code: int) -> JSONResponse:
    """Build the proxy's error envelope."""
    return JSONResponse({"error": True, "msg": msg}, status_code=status_code)


def _upstream_headers(request: Request) -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    authorization = request.headers.get("authorization")
    if authorization is not None:
        headers["Authorization"] = authorization
    return headers


def _key_segments(request: Request, route_prefix: str) -> List[str]:
    """
    Split the key part of the request path into decoded segments.

    Works on the undecoded path so that an escaped slash (%2F) stays inside
    its segment instead of starting a new one. Empty segments are dropped.
    """
    raw_path = request.scope.get("raw_path") or request.scope["path"].encode("utf-8")
    path = raw_path.split(b"?", 1)[0].decode("latin-1")

    # <prefix>/<action>/<key...>
    skip = len([p for p in route_prefix.split("/") if p]) + 1
    parts = [p for p in path.split("/") if p][skip:]
    segments = [unquote(p) for p in parts]

    if not segments:
        raise ValidationError("Missing key", error_code="VAL_001")
    return segments


async def _read_set_value(request: Request) -> str:
    """
    Extract the value to store from a set request.

    JSON bodies must be an object with a ``value`` member; string values pass
    through, anything else is re-serialized. Other content types are taken as
    raw UTF-8 text and must not be empty.
    """
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError:
            body = None

        if not isinstance(body, dict) or "value" not in body:
            raise ValidationError("JSON body must include { value }", error_code="VAL_001")

        value = body["value"]
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError(
            "Request body is not valid UTF-8", error_code="VAL_004", original_exception=e
        )

    if not text:
        raise ValidationError("Request body is empty", error_code="VAL_001")
    return text


def create_proxy_app(
    config: ProxyConfig, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Starlette:
    """
    Create Starlette application with the forwarding routes.

    Args:
        config: Proxy configuration
        transport: Optional httpx transport for upstream calls (tests inject
            httpx.MockTransport here)

    Returns:
        Configured Starlette application ready to be run with uvicorn
    """
    startup_time = time.time()

    bound_logger = logger.bind(component="UpstashProxy")

    async def forward(
        request: Request, method: str, target_url: str, content: Optional[bytes] = None
    ) -> Response:
        headers = _upstream_headers(request)
        if content is not None:
            headers["Content-Type"] = "application/json; charset=utf-8"

        async with httpx.AsyncClient(
            transport=transport, timeout=httpx.Timeout(config.upstream_timeout)
        ) as client:
            upstream = await client.request(method, target_url, headers=headers, content=content)

        bound_logger.info(
            "proxy_forwarded",
            method=method,
            target_url=target_url,
            status_code=upstream.status_code,
            reason=upstream.reason_phrase,
            body_length=len(content) if content is not None else None,
        )

        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            media_type=JSON_CONTENT_TYPE,
        )

    async def handle_forward(request: Request) -> Response:
        """
        Relay one get/set call to the store.

        Validation failures answer with their own 4xx status, anything
        unexpected with 500. Both use the {"error": true, "msg": ...} envelope.
        """
        method = request.method
        action = request.path_params.get("action", "")

        if method == "OPTIONS":
            return JSONResponse({"body": "OK"}, status_code=200)

        try:
            endpoint = require_endpoint(
                request.query_params.get("endpoint"), config.trusted_domain_suffix
            )

            if method == "GET":
                if action != "get":
                    raise ActionNotAllowedError(
                        f'GET only supports action "get", got "{action}"', status_code=405
                    )
                segments = _key_segments(request, config.route_prefix)
                return await forward(request, "GET", build_upstream_url(endpoint, "get", segments))

            if action == "set":
                segments = _key_segments(request, config.route_prefix)
                value = await _read_set_value(request)
                return await forward(
                    request,
                    "POST",
                    build_upstream_url(endpoint, "set", segments),
                    content=encode_set_body(value),
                )

            if action == "get":
                segments = _key_segments(request, config.route_prefix)
                return await forward(request, "GET", build_upstream_url(endpoint, "get", segments))

            raise ActionNotAllowedError(f'forbidden action "{action}"', status_code=403)

        except ValidationError as e:
            bound_logger.warning(
                "proxy_request_rejected",
                method=method,
                action=action,
                status_code=e.status_code,
                error=e.message,
                error_code=e.error_code,
            )
            return error_response(e.message, e.status_code)

        except Exception as e:
            bound_logger.error(
                "proxy_request_failed",
                method=method,
                action=action,
                error=str(e),
                error_type=type(e).__name__,
            )
            msg = e.message if isinstance(e, UpsyncError) else (str(e) or type(e).__name__)
            return error_response(msg, 500)

    async def handle_health(request: Request) -> Response:
        """
        Health check endpoint for monitoring and service verification.

        Returns:
            JSON response with status, version, uptime and the trusted suffix
        """
        return JSONResponse(
            {
                "status": "healthy",
                "version": __version__,
                "uptime_seconds": round(time.time() - startup_time, 2),
                "trusted_domain_suffix": config.trusted_domain_suffix,
            }
        )

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )
    ]

    forward_path = f"{config.route_prefix}/{{action}}/{{key:path}}"
    routes = [
        Route(forward_path, endpoint=handle_forward, methods=["GET", "POST", "OPTIONS"]),
        Route("/health", endpoint=handle_health, methods=["GET"]),
    ]

    bound_logger.info(
        "Proxy application created",
        route=forward_path,
        cors_origins=config.cors_origins,
        trusted_domain_suffix=config.trusted_domain_suffix,
    )

    return Starlette(routes=routes, middleware=middleware)


__all__ = [
    "create_proxy_app",
    "error_response",
    "JSON_CONTENT_TYPE",
]
