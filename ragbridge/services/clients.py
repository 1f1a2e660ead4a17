# =============================================================================
# Provider Clients — Explicit, Injected Client Holder
# =============================================================================
#
# Owns the embedder, the vector store, the chat provider and the chunk id
# generator for the lifetime of the application. One instance is built in
# create_app() and stored on app.state; route handlers receive it through a
# FastAPI dependency (ragbridge/api/deps.py).
#
# INITIALIZATION:
#   ensure_ready()
#     1. build any client not passed to the constructor (from settings)
#     2. list collections on the vector store
#     3. create the target collection if absent (1536 dims, cosine)
#     4. poll the store until it reports the collection ready
#     5. mark ready; later calls make no network calls
#
# A failure anywhere in 1–4 raises ProviderInitializationError and leaves
# the holder un-ready, so the next request retries from the start.
#
# CONCURRENCY: there is no lock. Two concurrent first requests may both run
# initialization; the second create_collection() then hits an existing name,
# which is tolerated by re-listing (see _create_collection).
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import time

from ragbridge.config import Settings
from ragbridge.errors import ProviderInitializationError
from ragbridge.services.embedder import Embedder, OpenAIEmbedder
from ragbridge.services.ids import ChunkIdGenerator
from ragbridge.services.llm import LLMProvider, get_llm_provider
from ragbridge.services.vectorstore import VectorStore, get_vector_store

logger = logging.getLogger(__name__)

COLLECTION_METRIC = "cosine"


class ProviderClients:
    """
    Holder for the three external collaborators and the chunk id generator.

    Any client may be injected (tests pass fakes); missing ones are built
    from settings on the first call to ensure_ready().
    """

    def __init__(
        self,
        settings: Settings,
        embedder: Embedder | None = None,
        store: VectorStore | None = None,
        llm: LLMProvider | None = None,
        chunk_ids: ChunkIdGenerator | None = None,
    ) -> None:
        self.settings = settings
        self.embedder = embedder
        self.store = store
        self.llm = llm
        self.chunk_ids = chunk_ids or ChunkIdGenerator()
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    async def ensure_ready(self) -> ProviderClients:
        """
        Initialize once; afterwards return immediately.

        Raises:
            ProviderInitializationError: A client could not be built, or the
                collection could not be listed, created, or made ready.
        """
        if self._ready:
            return self

        self._build_missing_clients()

        try:
            existing = await self.store.list_collections()
        except Exception as e:
            logger.error("Vector store initialization error: %s", e)
            raise ProviderInitializationError(
                f"Failed to list collections: {e}", step="list",
            ) from e

        if self.store.index_name not in existing:
            await self._create_collection()
            await self._wait_until_ready()

        self._ready = True
        logger.info("Vector collection '%s' ready", self.store.index_name)
        return self

    # -------------------------------------------------------------------------
    # Internal Helpers
    # -------------------------------------------------------------------------

    def _build_missing_clients(self) -> None:
        try:
            if self.embedder is None:
                self.embedder = OpenAIEmbedder(self.settings)
            if self.store is None:
                self.store = get_vector_store(self.settings)
            if self.llm is None:
                self.llm = get_llm_provider(self.settings)
        except ValueError as e:
            logger.error("Provider configuration error: %s", e)
            raise ProviderInitializationError(
                str(e), provider="config", step="configure",
            ) from e

    async def _create_collection(self) -> None:
        try:
            await self.store.create_collection(
                dimension=self.settings.embedding_dimensions,
                metric=COLLECTION_METRIC,
            )
        except Exception as e:
            # A concurrent initializer may have created it first.
            try:
                existing = await self.store.list_collections()
            except Exception:
                existing = []
            if self.store.index_name in existing:
                logger.info(
                    "Collection '%s' was created concurrently",
                    self.store.index_name,
                )
                return
            logger.error("Vector store initialization error: %s", e)
            raise ProviderInitializationError(
                f"Failed to create collection "
                f"'{self.store.index_name}': {e}",
                step="create",
            ) from e

    async def _wait_until_ready(self) -> None:
        interval = self.settings.index_ready_poll_interval
        deadline = time.monotonic() + self.settings.index_ready_timeout

        while True:
            try:
                if await self.store.collection_ready():
                    return
            except Exception as e:
                logger.error("Vector store readiness check failed: %s", e)
                raise ProviderInitializationError(
                    f"Failed to check readiness of "
                    f"'{self.store.index_name}': {e}",
                    step="wait",
                ) from e

            if time.monotonic() >= deadline:
                raise ProviderInitializationError(
                    f"Collection '{self.store.index_name}' not ready after "
                    f"{self.settings.index_ready_timeout:.0f}s",
                    step="wait",
                )
            logger.debug(
                "Waiting for collection '%s' to become ready",
                self.store.index_name,
            )
            await asyncio.sleep(interval)
