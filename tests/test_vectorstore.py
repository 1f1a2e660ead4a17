# =============================================================================
# Unit Tests — Vector Store Backends
# =============================================================================
#
# ChromaDB runs in-process (no external services needed). Pinecone is
# exercised against a mocked SDK client to check the calls we make and how
# responses are mapped.
# =============================================================================

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from ragbridge.services.vectorstore import (
    ChromaVectorStore,
    PineconeVectorStore,
    SimilarityMatch,
    VectorRecord,
    get_vector_store,
)
from tests.fakes import make_settings


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# ChromaDB
# ---------------------------------------------------------------------------


class TestChromaVectorStore:
    """Tests for ChromaVectorStore (in-process mode)."""

    _test_counter = 0

    def _make_store(self) -> ChromaVectorStore:
        """Create a store bound to a fresh, uniquely named collection."""
        TestChromaVectorStore._test_counter += 1
        name = f"test-collection-{TestChromaVectorStore._test_counter}"
        store = ChromaVectorStore(
            make_settings(vectorstore_type="chroma", pinecone_index_name=name)
        )
        _run(store.create_collection(dimension=3, metric="cosine"))
        return store

    def test_created_collection_is_listed(self):
        store = self._make_store()
        assert store.index_name in _run(store.list_collections())
        assert _run(store.collection_ready())

    def test_query_ranks_by_similarity(self):
        store = self._make_store()
        _run(store.upsert([
            VectorRecord(id="rev", values=[1.0, 0.0, 0.0], metadata={"text": "Revenue grew"}),
            VectorRecord(id="exp", values=[0.0, 1.0, 0.0], metadata={"text": "Expenses fell"}),
        ]))

        matches = _run(store.query(vector=[1.0, 0.0, 0.0], top_k=2))

        assert len(matches) == 2
        assert all(isinstance(m, SimilarityMatch) for m in matches)
        assert matches[0].id == "rev"
        assert matches[0].text == "Revenue grew"
        assert matches[0].score >= matches[1].score
        assert matches[0].score == pytest.approx(1.0, abs=1e-3)

    def test_upsert_same_id_overwrites(self):
        store = self._make_store()
        _run(store.upsert([
            VectorRecord(id="X", values=[1.0, 0.0, 0.0], metadata={"text": "old"}),
        ]))
        _run(store.upsert([
            VectorRecord(id="X", values=[1.0, 0.0, 0.0], metadata={"text": "new"}),
        ]))

        matches = _run(store.query(vector=[1.0, 0.0, 0.0], top_k=5))

        assert [m.id for m in matches] == ["X"]
        assert matches[0].text == "new"


# ---------------------------------------------------------------------------
# Pinecone
# ---------------------------------------------------------------------------


class TestPineconeVectorStore:
    """Tests for PineconeVectorStore against a mocked SDK."""

    def _make_store(self, **overrides) -> tuple[PineconeVectorStore, MagicMock]:
        with patch("ragbridge.services.vectorstore.Pinecone") as pinecone_cls:
            store = PineconeVectorStore(make_settings(**overrides))
        return store, pinecone_cls.return_value

    def test_requires_api_key(self):
        with pytest.raises(ValueError, match="PINECONE_API_KEY"):
            PineconeVectorStore(make_settings(pinecone_api_key=""))

    def test_list_collections_returns_names(self):
        store, sdk = self._make_store()
        sdk.list_indexes.return_value.names.return_value = ["a", "text-embeddings"]

        assert _run(store.list_collections()) == ["a", "text-embeddings"]

    def test_create_collection_is_serverless_in_configured_region(self):
        store, sdk = self._make_store(pinecone_cloud="gcp", pinecone_region="us-central1")

        _run(store.create_collection(dimension=1536, metric="cosine"))

        kwargs = sdk.create_index.call_args.kwargs
        assert kwargs["name"] == "text-embeddings"
        assert kwargs["dimension"] == 1536
        assert kwargs["metric"] == "cosine"
        assert kwargs["spec"].cloud == "gcp"
        assert kwargs["spec"].region == "us-central1"

    def test_collection_ready_reads_index_status(self):
        store, sdk = self._make_store()
        sdk.describe_index.return_value = SimpleNamespace(status={"ready": False})
        assert _run(store.collection_ready()) is False

        sdk.describe_index.return_value = SimpleNamespace(status={"ready": True})
        assert _run(store.collection_ready()) is True

    def test_upsert_sends_id_values_metadata(self):
        store, sdk = self._make_store()

        _run(store.upsert([
            VectorRecord(id="doc1", values=[0.1, 0.2], metadata={"text": "hi"}),
        ]))

        sdk.Index.assert_called_once_with("text-embeddings")
        sdk.Index.return_value.upsert.assert_called_once_with(
            vectors=[{"id": "doc1", "values": [0.1, 0.2], "metadata": {"text": "hi"}}]
        )

    def test_query_maps_matches(self):
        store, sdk = self._make_store()
        sdk.Index.return_value.query.return_value = SimpleNamespace(matches=[
            SimpleNamespace(id="doc1", score=0.91, metadata={"text": "The sky is blue."}),
            SimpleNamespace(id="doc2", score=0.42, metadata=None),
        ])

        matches = _run(store.query(vector=[0.1, 0.2], top_k=5))

        sdk.Index.return_value.query.assert_called_once_with(
            vector=[0.1, 0.2], top_k=5, include_metadata=True,
        )
        assert matches == [
            SimilarityMatch(id="doc1", score=0.91, metadata={"text": "The sky is blue."}),
            SimilarityMatch(id="doc2", score=0.42, metadata={}),
        ]
        assert matches[1].text == ""

    def test_index_handle_is_reused(self):
        store, sdk = self._make_store()
        sdk.Index.return_value.query.return_value = SimpleNamespace(matches=[])

        _run(store.query(vector=[0.0], top_k=1))
        _run(store.query(vector=[0.0], top_k=1))

        sdk.Index.assert_called_once()


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestGetVectorStore:
    def test_pinecone_is_default(self):
        with patch("ragbridge.services.vectorstore.Pinecone"):
            store = get_vector_store(make_settings())
        assert isinstance(store, PineconeVectorStore)

    def test_chroma_selected_by_setting(self):
        store = get_vector_store(make_settings(vectorstore_type="chroma"))
        assert isinstance(store, ChromaVectorStore)

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError, match="Unknown vector store type"):
            get_vector_store(make_settings(vectorstore_type="faiss"))
