# =============================================================================
# Health API — Liveness Check
# =============================================================================
#
# Always 200 while the process is serving, whatever the method. Does NOT
# touch the providers: a health check must not trigger (or wait for) vector
# index creation.
# =============================================================================

from fastapi import APIRouter, Request

from ragbridge.models.responses import HealthResponse

router = APIRouter(tags=["Health"])

HEALTH_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route(
    "/",
    methods=HEALTH_METHODS,
    response_model=HealthResponse,
    summary="Service status",
)
@router.api_route(
    "/health",
    methods=HEALTH_METHODS,
    response_model=HealthResponse,
    summary="Service status",
)
async def health_check(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(
        status="ok",
        service=settings.app_name,
        version=settings.app_version,
    )
