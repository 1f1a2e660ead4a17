# =============================================================================
# Unit Tests — Answer Service
# =============================================================================
#
# Walks every branch of the retrieve-and-answer flow: exact match (strict
# prompt), best-match fallback (lenient prompt), NotFound, validation, and
# provider failures. Uses a stub model that echoes the context it receives.
# =============================================================================

from __future__ import annotations

import asyncio

import pytest

from ragbridge.errors import ProviderError, ValidationError
from ragbridge.services.answering import (
    ANSWER_MAX_TOKENS,
    ANSWER_TEMPERATURE,
    MIN_BEST_MATCH_SCORE,
    REFUSAL_SENTENCE,
    TOP_K,
    AnswerFound,
    NotFoundOutcome,
    PromptVariant,
    answer,
    build_system_prompt,
    select_context,
)
from ragbridge.services.ingestion import ingest
from ragbridge.services.vectorstore import SimilarityMatch
from tests.fakes import FakeEmbedder, FakeVectorStore, StubLLM, make_clients


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _match(id: str, score: float, text: str | None = None) -> SimilarityMatch:
    return SimilarityMatch(id=id, score=score, metadata={"text": text or f"text of {id}"})


# ---------------------------------------------------------------------------
# Test: Context Selection
# ---------------------------------------------------------------------------


class TestSelectContext:
    """Tests for the exact-match / best-match decision."""

    def test_no_matches(self):
        assert select_context([], "doc1") is None

    def test_exact_match_wins_even_with_low_score(self):
        matches = [_match("other", 0.9), _match("doc1", 0.1)]

        match, variant = select_context(matches, "doc1")

        assert match.id == "doc1"
        assert variant is PromptVariant.STRICT

    def test_best_match_used_at_threshold(self):
        matches = [_match("a", MIN_BEST_MATCH_SCORE), _match("b", 0.3)]

        match, variant = select_context(matches, "missing")

        assert match.id == "a"
        assert variant is PromptVariant.LENIENT

    def test_best_match_below_threshold_rejected(self):
        matches = [_match("a", 0.49), _match("b", 0.2)]
        assert select_context(matches, "missing") is None


# ---------------------------------------------------------------------------
# Test: System Prompts
# ---------------------------------------------------------------------------


class TestBuildSystemPrompt:
    def test_strict_prompt_contains_refusal_and_context(self):
        prompt = build_system_prompt("The sky is blue.", PromptVariant.STRICT)
        assert REFUSAL_SENTENCE in prompt
        assert "only the provided" in prompt
        assert prompt.endswith("Context: The sky is blue.")

    def test_lenient_prompt_has_no_refusal(self):
        prompt = build_system_prompt("The sky is blue.", PromptVariant.LENIENT)
        assert REFUSAL_SENTENCE not in prompt
        assert "concise" in prompt
        assert prompt.endswith("Context: The sky is blue.")


# ---------------------------------------------------------------------------
# Test: Validation
# ---------------------------------------------------------------------------


class TestAnswerValidation:
    """Invalid input fails before any provider call."""

    @pytest.mark.parametrize("question", ["", None, 7])
    def test_invalid_question(self, question):
        embedder = FakeEmbedder()
        store = FakeVectorStore()
        clients = make_clients(embedder=embedder, store=store)

        with pytest.raises(ValidationError, match="Valid question string is required"):
            _run(answer(clients, question, "doc1"))

        assert embedder.calls == []
        assert store.list_calls == 0

    @pytest.mark.parametrize("document_id", ["", None])
    def test_missing_document_id(self, document_id):
        embedder = FakeEmbedder()
        clients = make_clients(embedder=embedder)

        with pytest.raises(ValidationError, match="Document ID is required"):
            _run(answer(clients, "What color is the sky?", document_id))

        assert embedder.calls == []


# ---------------------------------------------------------------------------
# Test: Answer Flow
# ---------------------------------------------------------------------------


class TestAnswer:
    """End-to-end service flow with fakes."""

    def test_exact_match_answers_from_that_chunk_only(self):
        store = FakeVectorStore()
        store.query_result = [
            _match("noise", 0.95, "Grass is green."),
            _match("doc1", 0.40, "The sky is blue."),
        ]
        llm = StubLLM()
        clients = make_clients(store=store, llm=llm)

        outcome = _run(answer(clients, "What color is the sky?", "doc1"))

        assert isinstance(outcome, AnswerFound)
        # The stub echoes its context, so the answer IS the context it saw
        assert outcome.answer == "The sky is blue."
        assert outcome.variant is PromptVariant.STRICT
        assert "Grass is green." not in llm.calls[0]["system"]
        assert REFUSAL_SENTENCE in llm.calls[0]["system"]

    def test_unknown_id_with_low_best_score_is_not_found(self):
        store = FakeVectorStore()
        store.query_result = [_match("a", 0.3), _match("b", 0.1)]
        llm = StubLLM()
        clients = make_clients(store=store, llm=llm)

        outcome = _run(answer(clients, "What color is the sky?", "nonexistent-id"))

        assert outcome == NotFoundOutcome(question="What color is the sky?")
        assert llm.calls == []

    def test_unknown_id_with_good_best_score_uses_lenient_prompt(self):
        store = FakeVectorStore()
        store.query_result = [
            _match("a", 0.82, "The sky is blue."),
            _match("b", 0.60, "Grass is green."),
        ]
        llm = StubLLM()
        clients = make_clients(store=store, llm=llm)

        outcome = _run(answer(clients, "What color is the sky?", "nonexistent-id"))

        assert isinstance(outcome, AnswerFound)
        assert outcome.answer == "The sky is blue."
        assert outcome.source_id == "a"
        assert outcome.variant is PromptVariant.LENIENT
        assert REFUSAL_SENTENCE not in llm.calls[0]["system"]

    def test_empty_store_is_not_found(self):
        llm = StubLLM()
        clients = make_clients(store=FakeVectorStore(), llm=llm)

        outcome = _run(answer(clients, "anything?", "doc1"))

        assert isinstance(outcome, NotFoundOutcome)
        assert llm.calls == []

    def test_generation_parameters(self):
        store = FakeVectorStore()
        store.query_result = [_match("doc1", 0.9)]
        llm = StubLLM()
        clients = make_clients(store=store, llm=llm)

        _run(answer(clients, "What is it?", "doc1"))

        call = llm.calls[0]
        assert call["temperature"] == ANSWER_TEMPERATURE == 0.7
        assert call["max_tokens"] == ANSWER_MAX_TOKENS == 500
        assert call["messages"] == [{"role": "user", "content": "What is it?"}]

    def test_search_requests_top_five_with_metadata(self):
        embedder = FakeEmbedder(vectors={"q?": [0.0, 1.0, 0.0]})
        store = FakeVectorStore()
        clients = make_clients(embedder=embedder, store=store)

        _run(answer(clients, "q?", "doc1"))

        assert store.query_calls == [
            {"vector": [0.0, 1.0, 0.0], "top_k": TOP_K, "include_metadata": True}
        ]
        assert TOP_K == 5

    def test_sky_scenario_after_ingest(self):
        embedder = FakeEmbedder(vectors={
            "The sky is blue.": [1.0, 0.0, 0.0],
            "What color is the sky?": [0.9, 0.1, 0.0],
        })
        llm = StubLLM(replies={"sky is blue": "Blue."})
        clients = make_clients(embedder=embedder, llm=llm)

        stored = _run(ingest(clients, "The sky is blue.", chunk_id="doc1"))
        outcome = _run(answer(clients, "What color is the sky?", "doc1"))

        assert stored.id == "doc1"
        assert outcome.question == "What color is the sky?"
        assert outcome.answer == "Blue."


# ---------------------------------------------------------------------------
# Test: Provider Failures
# ---------------------------------------------------------------------------


class TestAnswerFailures:
    """Provider failures raise ProviderError, never NotFound."""

    def test_embedding_failure(self):
        store = FakeVectorStore()
        clients = make_clients(
            embedder=FakeEmbedder(error=RuntimeError("embedding timeout")),
            store=store,
        )

        with pytest.raises(ProviderError) as exc_info:
            _run(answer(clients, "q?", "doc1"))

        assert exc_info.value.step == "embed"
        assert store.query_calls == []

    def test_query_failure(self):
        store = FakeVectorStore()
        store.query_error = RuntimeError("index not found")
        clients = make_clients(store=store)

        with pytest.raises(ProviderError, match="index not found") as exc_info:
            _run(answer(clients, "q?", "doc1"))

        assert exc_info.value.provider == "vectorstore"

    def test_completion_failure(self):
        store = FakeVectorStore()
        store.query_result = [_match("doc1", 0.9)]
        clients = make_clients(
            store=store, llm=StubLLM(error=RuntimeError("rate limited")),
        )

        with pytest.raises(ProviderError, match="rate limited") as exc_info:
            _run(answer(clients, "q?", "doc1"))

        assert exc_info.value.provider == "llm"
