# =============================================================================
# Ask API — Grounded Question Answering
# =============================================================================
#
# POST /ask
#   200 {question, answer}
#   400 {error: "Valid question string is required" | "Document ID is required"}
#   404 {error: "No relevant context found", question}
#   500 {error: "Failed to process question", details: <provider message>}
#
# 404 is an expected outcome of retrieval and is logged at info level only.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ragbridge.api.deps import get_clients
from ragbridge.errors import ProviderError, ValidationError
from ragbridge.models.requests import AskRequest
from ragbridge.models.responses import AskResponse, ErrorResponse, NotFoundResponse
from ragbridge.services.answering import NotFoundOutcome, answer
from ragbridge.services.clients import ProviderClients

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Question Answering"])


@router.post(
    "/ask",
    response_model=AskResponse,
    summary="Ask a question about a stored chunk",
    description=(
        "Embeds the question, retrieves the closest stored chunks, and answers "
        "from the chunk whose id is `documentID` (or from the best match if it "
        "is similar enough)."
    ),
    responses={
        400: {"model": ErrorResponse},
        404: {"model": NotFoundResponse},
        500: {"model": ErrorResponse},
    },
)
async def ask_endpoint(
    request: AskRequest,
    clients: ProviderClients = Depends(get_clients),
) -> AskResponse | JSONResponse:
    try:
        outcome = await answer(clients, request.question, request.document_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"error": str(e)}) from e
    except ProviderError as e:
        logger.error("Error in /ask (%s/%s): %s", e.provider, e.step, e)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to process question", "details": str(e)},
        ) from e

    if isinstance(outcome, NotFoundOutcome):
        return JSONResponse(
            status_code=404,
            content=NotFoundResponse(question=outcome.question).model_dump(),
        )

    return AskResponse(question=outcome.question, answer=outcome.answer)
