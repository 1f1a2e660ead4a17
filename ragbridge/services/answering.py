# =============================================================================
# Answer Service — Retrieve One Chunk, Answer From It
# =============================================================================
#
# STATES:
#   Embed ──▶ Search ──(no matches)──────────────────────────▶ NotFound
#               │
#               ▼
#          ExactMatch? ──(match.id == document_id)──▶ Answer(strict)
#               │ no
#               ▼
#          BestMatchCheck ──(matches[0].score >= 0.5)──▶ Answer(lenient)
#               │ no
#               ▼
#            NotFound
#
# The store returns matches sorted by descending score, so matches[0] is
# the best match.
#
# A match scoring below MIN_BEST_MATCH_SCORE is never used as fallback
# context for a document_id that was not found.
#
# NotFound is a valid outcome, not an error. Provider failures raise
# ProviderError and must never be reported as NotFound.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ragbridge.errors import ProviderError, ValidationError
from ragbridge.services.clients import ProviderClients
from ragbridge.services.vectorstore import SimilarityMatch

logger = logging.getLogger(__name__)

TOP_K = 5
MIN_BEST_MATCH_SCORE = 0.5

ANSWER_TEMPERATURE = 0.7
ANSWER_MAX_TOKENS = 500

REFUSAL_SENTENCE = "I'm sorry, I don't know."


class PromptVariant(str, Enum):
    STRICT = "strict"    # context is the requested document
    LENIENT = "lenient"  # context is the best match for another id


STRICT_SYSTEM_PROMPT = """\
You are a precise, context-driven assistant.
- You must answer using only the provided "Context" block. Do not draw on any outside knowledge.
- If the user's question uses different wording than the context, mentally paraphrase or expand synonyms to find the matching passage.
- If the answer cannot be found in the context, reply: "{refusal}"
- Keep your answer as concise as possible.

Context: {context}"""

LENIENT_SYSTEM_PROMPT = """\
Answer the question based on the provided context. Keep your answer concise.

Context: {context}"""


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass
class AnswerFound:
    question: str
    answer: str
    source_id: str
    variant: PromptVariant


@dataclass
class NotFoundOutcome:
    question: str


AnswerOutcome = AnswerFound | NotFoundOutcome


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_system_prompt(context: str, variant: PromptVariant) -> str:
    if variant is PromptVariant.STRICT:
        return STRICT_SYSTEM_PROMPT.format(
            refusal=REFUSAL_SENTENCE, context=context,
        )
    return LENIENT_SYSTEM_PROMPT.format(context=context)


def select_context(
    matches: list[SimilarityMatch],
    document_id: str,
) -> tuple[SimilarityMatch, PromptVariant] | None:
    """
    Pick the chunk to answer from, or None when nothing qualifies.

    An exact id match wins regardless of its score; otherwise the top match
    is used only if it reaches MIN_BEST_MATCH_SCORE.
    """
    if not matches:
        return None

    for match in matches:
        if match.id == document_id:
            logger.info("Found exact match for document ID: %s", document_id)
            return match, PromptVariant.STRICT

    logger.info("Document ID %s not found in available documents", document_id)
    best = matches[0]
    if best.score >= MIN_BEST_MATCH_SCORE:
        logger.info("Using best available match (score: %s)", best.score)
        return best, PromptVariant.LENIENT
    return None


async def answer(
    clients: ProviderClients,
    question: str | None,
    document_id: str | None,
) -> AnswerOutcome:
    """
    Answer `question` from the stored chunk best suited to `document_id`.

    Returns:
        AnswerFound with the model's text, or NotFoundOutcome when no
        stored chunk qualifies as context.

    Raises:
        ValidationError: Missing question or document id.
        ProviderInitializationError: Clients could not be made ready.
        ProviderError: Embedding, search, or completion failed.
    """
    if not question or not isinstance(question, str):
        raise ValidationError("Valid question string is required")
    if not document_id:
        raise ValidationError("Document ID is required")

    logger.info(
        'Received question: "%s" for document ID: %s',
        question[:80],
        document_id,
    )

    await clients.ensure_ready()

    # --- Embed ---
    try:
        question_embedding = await clients.embedder.embed(question)
    except Exception as e:
        logger.exception("Question embedding failed: %s", e)
        raise ProviderError(str(e), provider="embedding", step="embed") from e

    # --- Search ---
    try:
        matches = await clients.store.query(
            vector=question_embedding,
            top_k=TOP_K,
            include_metadata=True,
        )
    except Exception as e:
        logger.exception("Vector query failed: %s", e)
        raise ProviderError(str(e), provider="vectorstore", step="query") from e

    logger.info("Query results: %d matches", len(matches))
    for rank, match in enumerate(matches, start=1):
        logger.debug("%d. ID: %s, Score: %s", rank, match.id, match.score)

    # --- ExactMatch? / BestMatchCheck ---
    selected = select_context(matches, document_id)
    if selected is None:
        logger.info("No relevant context found for question")
        return NotFoundOutcome(question=question)

    match, variant = selected

    # --- Answer ---
    try:
        response = await clients.llm.complete(
            messages=[{"role": "user", "content": question}],
            system=build_system_prompt(match.text, variant),
            temperature=ANSWER_TEMPERATURE,
            max_tokens=ANSWER_MAX_TOKENS,
        )
    except Exception as e:
        logger.exception("Answer generation failed: %s", e)
        raise ProviderError(str(e), provider="llm", step="complete") from e

    return AnswerFound(
        question=question,
        answer=response.content,
        source_id=match.id,
        variant=variant,
    )
