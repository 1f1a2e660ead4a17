# =============================================================================
# Ingestion Service — Text Chunk → Stored Vector
# =============================================================================
#
# FLOW:
#   1. Validate the text (non-empty string), no provider call otherwise
#   2. Ensure provider clients are ready
#   3. Embed the text
#   4. Choose the id: caller-supplied chunk_id, else clients.chunk_ids
#   5. Upsert {id, values, metadata: {text}}, same id overwrites
#   6. Return the id and a 100-char preview
#
# Nothing is retained locally. The only copy of the chunk lives in the
# vector store, keyed by id.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass

from ragbridge.errors import ProviderError, ValidationError
from ragbridge.services.clients import ProviderClients
from ragbridge.services.vectorstore import VectorRecord

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


@dataclass
class IngestResult:
    id: str
    preview: str


def preview_text(text: str, limit: int = PREVIEW_LENGTH) -> str:
    """First `limit` characters, with "..." appended when truncated."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


async def ingest(
    clients: ProviderClients,
    text: str | None,
    chunk_id: str | None = None,
) -> IngestResult:
    """
    Embed a text chunk and upsert it into the vector store.

    Raises:
        ValidationError: `text` is missing, empty, or not a string.
        ProviderInitializationError: Clients could not be made ready.
        ProviderError: The embedding or upsert call failed.
    """
    if not text or not isinstance(text, str):
        raise ValidationError("Text content is required")

    await clients.ensure_ready()

    logger.info(
        "Processing text chunk (%d chars)%s",
        len(text),
        f" with ID {chunk_id}" if chunk_id else "",
    )

    try:
        embedding = await clients.embedder.embed(text)
    except Exception as e:
        logger.exception("Embedding failed: %s", e)
        raise ProviderError(str(e), provider="embedding", step="embed") from e

    record_id = chunk_id or clients.chunk_ids.next_id()

    try:
        await clients.store.upsert([
            VectorRecord(id=record_id, values=embedding, metadata={"text": text}),
        ])
    except Exception as e:
        logger.exception("Vector upsert failed: %s", e)
        raise ProviderError(str(e), provider="vectorstore", step="upsert") from e

    logger.info("Successfully stored embedding with ID: %s", record_id)
    return IngestResult(id=record_id, preview=preview_text(text))
