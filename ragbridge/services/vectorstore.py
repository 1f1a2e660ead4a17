# =============================================================================
# Vector Store Abstraction — Pluggable Backend Protocol
# =============================================================================
#
# A common interface over the external vector database, with concrete
# implementations for Pinecone (serverless index) and ChromaDB.
#
# The service treats the store as an opaque key-value-with-similarity-search
# collaborator. It never computes distances itself.
#
# Both SDKs are synchronous. Every method is exposed as a coroutine that
# runs the SDK call in a worker thread via asyncio.to_thread(), so one slow
# request never blocks the event loop for the others.
#
# ARCHITECTURE:
#   VectorStore (Protocol)
#   ├── PineconeVectorStore   — Pinecone serverless index (default)
#   └── ChromaVectorStore     — ChromaDB (in-process or client/server)
#   get_vector_store()        — factory, reads VECTORSTORE_TYPE
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

import chromadb
from pinecone import Pinecone, ServerlessSpec

from ragbridge.config import Settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class VectorRecord:
    """
    One stored chunk: its id, its embedding, and the text it came from.

    Upserting a record whose id already exists replaces it.
    """

    id: str
    values: list[float]
    metadata: dict = field(default_factory=dict)

    def to_payload(self) -> dict:
        return {"id": self.id, "values": self.values, "metadata": self.metadata}


@dataclass
class SimilarityMatch:
    """A single hit from a similarity query."""

    id: str
    score: float  # cosine similarity, higher = more similar
    metadata: dict = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.metadata.get("text", "")


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class VectorStore(Protocol):
    """
    Protocol defining the vector store interface.

    The store is bound to a single collection name at construction time.
    Collection management (list / create / readiness) is separate from data
    access so that ProviderClients can drive initialization explicitly.
    """

    index_name: str

    async def list_collections(self) -> list[str]:
        """Names of every collection visible to this API key."""
        ...

    async def create_collection(self, dimension: int, metric: str) -> None:
        """Create the bound collection."""
        ...

    async def collection_ready(self) -> bool:
        """True once the bound collection accepts reads and writes."""
        ...

    async def upsert(self, records: list[VectorRecord]) -> None:
        """Insert or overwrite records by id."""
        ...

    async def query(
        self,
        vector: list[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> list[SimilarityMatch]:
        """The top_k most similar records, highest score first."""
        ...


# ---------------------------------------------------------------------------
# Implementation 1: Pinecone
# ---------------------------------------------------------------------------


class PineconeVectorStore:
    """
    Pinecone-backed vector store.

    New indexes are created serverless in the configured cloud/region. The
    data-plane handle (`Index`) is resolved lazily because it cannot be used
    until the index exists.
    """

    def __init__(self, settings: Settings) -> None:
        if not settings.pinecone_api_key:
            raise ValueError(
                "No API key configured for Pinecone. "
                "Set PINECONE_API_KEY in .env"
            )

        self._client = Pinecone(api_key=settings.pinecone_api_key)
        self._cloud = settings.pinecone_cloud
        self._region = settings.pinecone_region
        self._index = None
        self.index_name = settings.pinecone_index_name

        logger.info(
            "Initialized Pinecone client (index=%s, cloud=%s, region=%s)",
            self.index_name,
            self._cloud,
            self._region,
        )

    def _get_index(self):
        if self._index is None:
            self._index = self._client.Index(self.index_name)
        return self._index

    async def list_collections(self) -> list[str]:
        index_list = await asyncio.to_thread(self._client.list_indexes)
        return list(index_list.names())

    async def create_collection(self, dimension: int, metric: str) -> None:
        logger.info("Creating new Pinecone index: %s", self.index_name)
        await asyncio.to_thread(
            self._client.create_index,
            name=self.index_name,
            dimension=dimension,
            metric=metric,
            spec=ServerlessSpec(cloud=self._cloud, region=self._region),
        )

    async def collection_ready(self) -> bool:
        description = await asyncio.to_thread(
            self._client.describe_index, self.index_name,
        )
        return bool(description.status["ready"])

    async def upsert(self, records: list[VectorRecord]) -> None:
        index = self._get_index()
        await asyncio.to_thread(
            index.upsert, vectors=[r.to_payload() for r in records],
        )

    async def query(
        self,
        vector: list[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> list[SimilarityMatch]:
        index = self._get_index()
        response = await asyncio.to_thread(
            index.query,
            vector=vector,
            top_k=top_k,
            include_metadata=include_metadata,
        )
        return [
            SimilarityMatch(
                id=match.id,
                score=match.score,
                metadata=dict(match.metadata or {}),
            )
            for match in response.matches
        ]


# ---------------------------------------------------------------------------
# Implementation 2: ChromaDB
# ---------------------------------------------------------------------------


class ChromaVectorStore:
    """
    ChromaDB-backed vector store, mainly for running the service locally
    without a Pinecone account.

    ChromaDB supports both in-process and client/server modes:
    - In-process (default): data lives in memory for the process lifetime
    - Client/server: set CHROMA_URL to a running Chroma server

    Chroma reports cosine *distance* in [0, 2]; it is converted to
    similarity as 1 - distance so scores are comparable with Pinecone's.
    """

    def __init__(self, settings: Settings) -> None:
        if settings.chroma_url:
            self._client = chromadb.HttpClient(host=settings.chroma_url)
        else:
            self._client = chromadb.Client()

        self._collection = None
        self.index_name = settings.pinecone_index_name

    def _get_collection(self):
        if self._collection is None:
            self._collection = self._client.get_collection(name=self.index_name)
        return self._collection

    async def list_collections(self) -> list[str]:
        collections = await asyncio.to_thread(self._client.list_collections)
        # Older clients return Collection objects, newer ones return names.
        return [c if isinstance(c, str) else c.name for c in collections]

    async def create_collection(self, dimension: int, metric: str) -> None:
        # Chroma infers dimension from the first insert.
        logger.info("Creating new Chroma collection: %s", self.index_name)
        self._collection = await asyncio.to_thread(
            self._client.get_or_create_collection,
            name=self.index_name,
            metadata={"hnsw:space": metric},
        )

    async def collection_ready(self) -> bool:
        return True

    async def upsert(self, records: list[VectorRecord]) -> None:
        collection = self._get_collection()
        await asyncio.to_thread(
            collection.upsert,
            ids=[r.id for r in records],
            embeddings=[r.values for r in records],
            metadatas=[r.metadata for r in records],
        )

    async def query(
        self,
        vector: list[float],
        top_k: int,
        include_metadata: bool = True,
    ) -> list[SimilarityMatch]:
        collection = self._get_collection()
        include = ["distances", "metadatas"] if include_metadata else ["distances"]
        results = await asyncio.to_thread(
            collection.query,
            query_embeddings=[vector],
            n_results=top_k,
            include=include,
        )

        matches: list[SimilarityMatch] = []
        if results and results["ids"] and results["ids"][0]:
            metadatas = results.get("metadatas") or [[]]
            for i, chroma_id in enumerate(results["ids"][0]):
                distance = results["distances"][0][i]
                metadata = metadatas[0][i] if metadatas[0] else {}
                matches.append(SimilarityMatch(
                    id=chroma_id,
                    score=round(1.0 - distance, 4),
                    metadata=dict(metadata or {}),
                ))
        return matches


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------


def get_vector_store(settings: Settings) -> PineconeVectorStore | ChromaVectorStore:
    """
    Build the configured vector store backend.

    Reads `vectorstore_type` from settings:
    - "pinecone" → PineconeVectorStore (default)
    - "chroma" → ChromaVectorStore

    Raises:
        ValueError: If the backend is unknown or its API key is missing.
    """
    store_type = settings.vectorstore_type

    if store_type == "chroma":
        logger.info("Using ChromaDB vector store")
        return ChromaVectorStore(settings)

    if store_type == "pinecone":
        logger.info("Using Pinecone vector store")
        return PineconeVectorStore(settings)

    raise ValueError(
        f"Unknown vector store type '{store_type}'. "
        "Supported types: ['chroma', 'pinecone']"
    )
