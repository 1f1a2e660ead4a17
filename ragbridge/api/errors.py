# =============================================================================
# Exception Handlers — JSON Error Bodies
# =============================================================================
#
# Every failure leaves the service as {"error": ..., "details"?: ...}:
#
#   HTTPException (raised by routers)  → detail dict as-is, or {"error": detail}
#   404 from the router (unknown path) → {"error": "Not found"}
#   405 from the router (wrong method) → {"error": "Method not allowed"}
#   RequestValidationError (bad body)  → 400 {"error": "Invalid request body", details}
#   anything else                      → 500 {"error": "Internal server error"}
#     (also called from CORSHeadersMiddleware so the 500 keeps its CORS headers)
# =============================================================================

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_ROUTER_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = exc.detail
    elif exc.detail == HTTPStatus(exc.status_code).phrase:
        # Raised by Starlette's router with its default phrase
        content = {"error": _ROUTER_MESSAGES.get(exc.status_code, exc.detail)}
    else:
        content = {"error": exc.detail}

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request body",
            "details": jsonable_encoder(exc.errors()),
        },
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception("Unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
