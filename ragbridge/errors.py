# =============================================================================
# Error Taxonomy
# =============================================================================
#
#   RAGBridgeError
#   ├── ValidationError              — bad caller input, never reaches a provider
#   └── ProviderError                — an embedding / vector / chat call failed
#       └── ProviderInitializationError — client or collection setup failed
#
# "No relevant context" is NOT an exception. It is the NotFoundOutcome
# variant returned by services/answering.py.
# =============================================================================

from __future__ import annotations


class RAGBridgeError(Exception):
    """Base class for every error raised by the service layer."""


class ValidationError(RAGBridgeError):
    """Caller input is missing or malformed. Maps to HTTP 400."""


class ProviderError(RAGBridgeError):
    """
    A downstream provider call failed. Maps to HTTP 500.

    Attributes:
        provider: Which collaborator failed ("embedding", "vectorstore", "llm").
        step: What the service was doing at the time ("embed", "upsert", ...).
    """

    def __init__(self, message: str, *, provider: str, step: str) -> None:
        super().__init__(message)
        self.provider = provider
        self.step = step


class ProviderInitializationError(ProviderError):
    """Building provider clients or preparing the vector collection failed."""

    def __init__(
        self,
        message: str,
        *,
        provider: str = "vectorstore",
        step: str = "initialize",
    ) -> None:
        super().__init__(message, provider=provider, step=step)
