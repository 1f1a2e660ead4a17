# =============================================================================
# Embedding Service — Text → Vector (Provider-Agnostic)
# =============================================================================
#
# Generates vector embeddings using any OpenAI-compatible embedding API.
# Each call embeds exactly one string: a chunk on ingestion, or the user's
# question on /ask.
#
# No retry logic lives here. A failed call propagates to the caller, which
# turns it into a ProviderError.
#
# TOKEN LIMITS:
# - Each text: max 8,191 tokens for text-embedding-3-small
# =============================================================================

from __future__ import annotations

import logging
from typing import Protocol

from openai import AsyncOpenAI

from ragbridge.config import Settings

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    """Anything that turns one string into one fixed-dimension vector."""

    async def embed(self, text: str) -> list[float]:
        ...


class OpenAIEmbedder:
    """
    Embedder backed by the OpenAI embeddings endpoint.

    The AsyncOpenAI client owns its own connection pool, so one instance is
    built per process and shared by every request.
    """

    def __init__(self, settings: Settings) -> None:
        resolved_key = settings.openai_api_key or settings.llm_api_key
        if not resolved_key:
            raise ValueError(
                "No API key configured for embeddings. "
                "Set OPENAI_API_KEY or LLM_API_KEY in .env"
            )

        client_kwargs: dict = {"api_key": resolved_key}
        if settings.embedding_base_url:
            client_kwargs["base_url"] = settings.embedding_base_url

        self._client = AsyncOpenAI(**client_kwargs)
        self._model = settings.embedding_model
        self._dimensions = settings.embedding_dimensions

        logger.info(
            "Initialized embedding client (model=%s, base_url=%s)",
            self._model,
            settings.embedding_base_url or "https://api.openai.com/v1",
        )

    async def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single string.

        Returns:
            A single embedding vector (list of `embedding_dimensions` floats).

        Raises:
            openai.APIError: If the API call fails.
        """
        response = await self._client.embeddings.create(
            model=self._model,
            input=text,
            dimensions=self._dimensions,
        )

        logger.debug(
            "Embedded %d chars, %d prompt tokens",
            len(text),
            response.usage.prompt_tokens if response.usage else 0,
        )
        return response.data[0].embedding
