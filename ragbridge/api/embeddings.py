# =============================================================================
# Embeddings API — Store a Text Chunk
# =============================================================================
#
# POST /embeddings
#   201 {success: true, id, text: <preview>}
#   400 {error: "Text content is required"}
#   500 {error: <provider message>}
#
# The handler is thin: request mapping and error translation only. The
# work happens in services/ingestion.py.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ragbridge.api.deps import get_clients
from ragbridge.errors import ProviderError, ValidationError
from ragbridge.models.requests import EmbeddingRequest
from ragbridge.models.responses import EmbeddingResponse, ErrorResponse
from ragbridge.services.clients import ProviderClients
from ragbridge.services.ingestion import ingest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Embeddings"])


@router.post(
    "/embeddings",
    response_model=EmbeddingResponse,
    status_code=201,
    summary="Embed and store a text chunk",
    description=(
        "Embeds the text and upserts it into the vector store under `chunkId` "
        "(or a generated id). Re-using an id overwrites the stored chunk."
    ),
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_embedding(
    request: EmbeddingRequest,
    clients: ProviderClients = Depends(get_clients),
) -> EmbeddingResponse:
    try:
        result = await ingest(clients, request.text, request.chunk_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"error": str(e)}) from e
    except ProviderError as e:
        logger.error("Error in /embeddings (%s/%s): %s", e.provider, e.step, e)
        raise HTTPException(status_code=500, detail={"error": str(e)}) from e

    return EmbeddingResponse(success=True, id=result.id, text=result.preview)
