# =============================================================================
# HTTP Middleware — CORS Headers, Preflight, Request Log
# =============================================================================
#
# CORSHeadersMiddleware
#   - Answers every OPTIONS request with 200 and an empty body before
#     routing, whether or not the browser sent preflight headers.
#   - Adds the CORS headers to every response, including 500s for errors
#     no handler caught.
#
# Origin policy (Access-Control-Allow-Origin):
#   - request origin contains "localhost" or "127.0.0.1" → echo it
#   - FRONTEND_URL is "*" and the request has an origin  → echo it
#   - FRONTEND_URL is a specific origin                  → that origin
#   - otherwise                                          → "*"
# Credentials are always allowed, and "Vary: Origin" is always sent.
#
# RequestLoggingMiddleware
#   - One log line per request with path and originating caller.
# =============================================================================

from __future__ import annotations

import logging

from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ragbridge.api.errors import unhandled_exception_handler

logger = logging.getLogger(__name__)

ALLOW_METHODS = "GET,OPTIONS,PATCH,DELETE,POST,PUT"
ALLOW_HEADERS = (
    "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
    "Content-MD5, Content-Type, Date, X-Api-Version, Authorization"
)

_LOCAL_ORIGIN_MARKERS = ("localhost", "127.0.0.1")


def resolve_allowed_origin(origin: str | None, frontend_url: str) -> str:
    """Value for Access-Control-Allow-Origin given the request's Origin."""
    if origin and (
        any(marker in origin for marker in _LOCAL_ORIGIN_MARKERS)
        or frontend_url == "*"
    ):
        return origin
    if frontend_url != "*":
        return frontend_url
    return "*"


def cors_headers(origin: str | None, frontend_url: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": resolve_allowed_origin(origin, frontend_url),
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Vary": "Origin",
    }


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Short-circuits OPTIONS and stamps CORS headers on every response."""

    def __init__(self, app: ASGIApp, frontend_url: str = "*") -> None:
        super().__init__(app)
        self.frontend_url = frontend_url

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        headers = cors_headers(request.headers.get("origin"), self.frontend_url)

        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)

        try:
            response = await call_next(request)
        except Exception as e:
            response = await unhandled_exception_handler(request, e)
        response.headers.update(headers)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs the path and origin of every routed request."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        logger.info(
            "Processing request for path: %s from origin: %s",
            request.url.path,
            request.headers.get("origin", "unknown"),
        )
        return await call_next(request)
