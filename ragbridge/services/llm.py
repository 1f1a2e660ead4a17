# =============================================================================
# Multi-Provider LLM Abstraction — Pluggable Chat Backend
# =============================================================================
#
# A common interface for chat completions, with concrete implementations
# for OpenAI-compatible APIs (OpenAI, DeepSeek, Qwen, ...) and Anthropic.
#
# Protocol (structural typing) over ABC, matching the VectorStore and
# Embedder interfaces: any object with an async `complete()` works, which
# is how the tests plug in a stub model.
#
# ARCHITECTURE:
#   LLMProvider (Protocol)
#   ├── OpenAICompatibleProvider — system prompt as a message role (default)
#   ├── AnthropicProvider        — system prompt as a top-level kwarg
#   └── get_llm_provider()       — factory, reads LLM_PROVIDER
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from ragbridge.config import Settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """
    Standardised response from any LLM provider.

    Normalises the different response formats (Anthropic vs OpenAI)
    into a single structure that downstream code can consume.
    """

    content: str           # The generated text
    model: str             # Model identifier (e.g., "gpt-3.5-turbo")
    input_tokens: int      # Tokens consumed by the prompt
    output_tokens: int     # Tokens generated in the response


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class LLMProvider(Protocol):
    """LLM provider interface. Checked statically by mypy."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Generate a completion from the LLM.

        Args:
            messages: Conversation messages as dicts with "role" and "content".
                Roles: "user", "assistant" (no "system"; use the system param).
            system: System prompt for the LLM.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens.

        Returns:
            LLMResponse with generated text and usage metrics.
        """
        ...


# ---------------------------------------------------------------------------
# Implementation 1: OpenAI-Compatible
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    Provider for OpenAI or any API that follows the OpenAI chat spec.

    Switching to another OpenAI-compatible vendor is a config change:
        LLM_BASE_URL=https://api.deepseek.com/v1
        LLM_API_KEY=your-key
        LLM_MODEL=deepseek-chat
    """

    def __init__(self, settings: Settings) -> None:
        from openai import AsyncOpenAI

        resolved_key = settings.llm_api_key or settings.openai_api_key
        if not resolved_key:
            raise ValueError(
                "No API key configured for OpenAI-compatible provider. "
                "Set OPENAI_API_KEY or LLM_API_KEY in .env"
            )

        client_kwargs: dict = {"api_key": resolved_key}
        if settings.llm_base_url:
            client_kwargs["base_url"] = settings.llm_base_url

        self._client = AsyncOpenAI(**client_kwargs)
        self._model = settings.chat_model

        logger.info(
            "Initialized OpenAICompatibleProvider (model=%s, base_url=%s)",
            self._model,
            settings.llm_base_url or "https://api.openai.com/v1",
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion using an OpenAI-compatible API."""
        # OpenAI: system prompt goes as the first message
        all_messages: list[dict[str, str]] = []
        if system:
            all_messages.append({"role": "system", "content": system})
        all_messages.extend(messages)

        kwargs: dict = {"model": self._model, "messages": all_messages}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        response = await self._client.chat.completions.create(**kwargs)

        content = response.choices[0].message.content or ""

        usage = response.usage
        return LLMResponse(
            content=content,
            model=response.model or self._model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )


# ---------------------------------------------------------------------------
# Implementation 2: Anthropic (Claude)
# ---------------------------------------------------------------------------


class AnthropicProvider:
    """
    Anthropic Claude provider using the native SDK.

    Anthropic takes system prompts as a top-level `system=` kwarg, NOT as a
    message with role "system", and requires max_tokens on every call.
    """

    _DEFAULT_MAX_TOKENS = 1024

    def __init__(self, settings: Settings) -> None:
        from anthropic import AsyncAnthropic

        resolved_key = settings.llm_api_key or settings.anthropic_api_key
        if not resolved_key:
            raise ValueError(
                "No Anthropic API key configured. Set LLM_API_KEY or "
                "ANTHROPIC_API_KEY in .env"
            )

        self._client = AsyncAnthropic(api_key=resolved_key)
        self._model = settings.chat_model

        logger.info("Initialized AnthropicProvider (model=%s)", self._model)

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion using Claude."""
        kwargs: dict = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens or self._DEFAULT_MAX_TOKENS,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        if system:
            kwargs["system"] = system

        response = await self._client.messages.create(**kwargs)

        # Extract text from the first content block
        content = ""
        for block in response.content:
            if block.type == "text":
                content = block.text
                break

        return LLMResponse(
            content=content,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------


def get_llm_provider(settings: Settings) -> OpenAICompatibleProvider | AnthropicProvider:
    """
    Build the configured LLM provider.

    Reads `llm_provider` from settings:
    - "openai_compatible" → OpenAICompatibleProvider (default)
    - "anthropic" → AnthropicProvider

    Raises:
        ValueError: If the provider is unknown or its API key is missing.
    """
    if settings.llm_provider == "anthropic":
        return AnthropicProvider(settings)
    if settings.llm_provider == "openai_compatible":
        return OpenAICompatibleProvider(settings)

    raise ValueError(
        f"Unknown provider type '{settings.llm_provider}'. "
        "Supported types: ['anthropic', 'openai_compatible']"
    )
