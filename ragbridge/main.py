# =============================================================================
# Application Factory
# =============================================================================
#
# ROUTE TABLE (each path also served under API_PREFIX, default /api):
#   *    /            → health (GET, POST, PUT, PATCH, DELETE)
#   *    /health      → health
#   POST /embeddings  → ingestion
#   POST /ask         → question answering
#   OPTIONS *         → 200, empty body (middleware, before routing)
#   anything else     → 404 {"error": "Not found"}, trailing slashes included
#
# Provider clients are NOT contacted at startup. The first /embeddings or
# /ask request runs ProviderClients.ensure_ready().
#
# RUN:
#   uvicorn ragbridge.main:app --reload
# =============================================================================

from __future__ import annotations

import logging

from fastapi import FastAPI

from ragbridge.api import ask, embeddings, health
from ragbridge.api.errors import register_exception_handlers
from ragbridge.api.middleware import CORSHeadersMiddleware, RequestLoggingMiddleware
from ragbridge.config import Settings, get_settings
from ragbridge.services.clients import ProviderClients

logger = logging.getLogger(__name__)

_ROUTERS = (health.router, embeddings.router, ask.router)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    clients: ProviderClients | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration. Defaults to the cached environment settings.
        clients: Provider client holder. Defaults to one built lazily from
            settings; tests pass a holder wired with fakes.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.clients = clients or ProviderClients(settings)

    for router in _ROUTERS:
        app.include_router(router)
        if settings.api_prefix:
            app.include_router(
                router, prefix=settings.api_prefix, include_in_schema=False,
            )

    if settings.api_prefix:
        # "/api" with no trailing path is the health check too
        app.add_api_route(
            settings.api_prefix,
            health.health_check,
            methods=health.HEALTH_METHODS,
            include_in_schema=False,
        )

    register_exception_handlers(app)

    # Added last = outermost: preflight is answered before logging/routing.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CORSHeadersMiddleware, frontend_url=settings.frontend_url)

    logger.info(
        "%s %s configured (vectorstore=%s, llm=%s, model=%s)",
        settings.app_name,
        settings.app_version,
        settings.vectorstore_type,
        settings.llm_provider,
        settings.chat_model,
    )
    return app


app = create_app()
