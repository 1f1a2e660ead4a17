# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API. Every
# non-2xx body is an ErrorResponse (or NotFoundResponse for /ask), so
# clients can always read `error`.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response for GET /health, confirms the API is running."""

    status: str = "ok"
    service: str
    version: str


class EmbeddingResponse(BaseModel):
    """Response for POST /embeddings: the chunk was embedded and stored."""

    success: bool = True
    id: str = Field(description="Id the chunk is stored under")
    text: str = Field(
        description="The stored text, truncated to 100 characters with '...'"
    )


class AskResponse(BaseModel):
    """Response for POST /ask: the grounded answer."""

    question: str = Field(description="The original question (echoed back)")
    answer: str = Field(description="The generated answer")


class NotFoundResponse(BaseModel):
    """
    Response for POST /ask when no stored chunk qualifies as context.

    Returned with HTTP 404. This is an expected outcome, not a failure.
    """

    error: str = "No relevant context found"
    question: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    details: str | list | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"error": "Failed to process question", "details": "Rate limit exceeded"}
            ]
        }
    )
