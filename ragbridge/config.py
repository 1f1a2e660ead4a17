# =============================================================================
# Application Configuration — Pydantic Settings
# =============================================================================
#
# All runtime configuration comes from environment variables (or a .env
# file in the working directory). Pydantic Settings resolves values in this
# order, highest first:
#   1. Environment variables (e.g., `PINECONE_INDEX_NAME=...`)
#   2. Values from the .env file
#   3. Default values defined below
#
# USAGE:
#   from ragbridge.config import get_settings
#   print(get_settings().pinecone_index_name)
# =============================================================================

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    API keys have no usable defaults. Everything else defaults to the values
    the service has always run with.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "RAG Bridge"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Requests may arrive as /api/ask or /ask; the prefix is stripped by
    # mounting every router a second time under it.
    api_prefix: str = "/api"

    # Browser origin allowed to call the API. "*" permits every origin.
    # localhost / 127.0.0.1 origins are always allowed.
    frontend_url: str = "*"

    # -------------------------------------------------------------------------
    # API Keys — External Services
    # -------------------------------------------------------------------------
    # OPENAI_API_KEY: embeddings, and chat completions for the default provider
    # PINECONE_API_KEY: vector store
    # ANTHROPIC_API_KEY: only read when LLM_PROVIDER=anthropic
    # -------------------------------------------------------------------------
    openai_api_key: str = ""
    pinecone_api_key: str = ""
    anthropic_api_key: str = ""

    # -------------------------------------------------------------------------
    # Embedding Configuration
    # -------------------------------------------------------------------------
    # The collection is created with this dimension, so changing the model
    # requires a new index name.
    # -------------------------------------------------------------------------
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    embedding_base_url: str | None = None

    # -------------------------------------------------------------------------
    # LLM Configuration — Multi-Provider
    # -------------------------------------------------------------------------
    #   - "openai_compatible": OpenAI or any OpenAI-compatible API (default)
    #   - "anthropic": Claude via native Anthropic SDK
    #
    # OPENAI_MODEL keeps its historical env name; LLM_MODEL is accepted as
    # an alias for deployments that configure the provider generically.
    # -------------------------------------------------------------------------
    llm_provider: str = "openai_compatible"
    llm_base_url: str | None = None
    llm_api_key: str | None = None
    openai_model: str = "gpt-3.5-turbo"
    llm_model: str | None = None

    # -------------------------------------------------------------------------
    # Vector Store Configuration — Pluggable Backend
    # -------------------------------------------------------------------------
    #   - "pinecone": Pinecone serverless index (default)
    #   - "chroma": ChromaDB, in-process or client/server via CHROMA_URL
    # -------------------------------------------------------------------------
    vectorstore_type: str = "pinecone"
    pinecone_index_name: str = "text-embeddings"
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"
    chroma_url: str | None = None

    # Newly created indexes are polled until the store reports them ready.
    index_ready_poll_interval: float = 1.0
    index_ready_timeout: float = 60.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def chat_model(self) -> str:
        """The chat model name, preferring LLM_MODEL when set."""
        return self.llm_model or self.openai_model


@lru_cache
def get_settings() -> Settings:
    """
    Create and cache a Settings instance.

    In tests, build a fresh `Settings(...)` and hand it to `create_app()`
    instead of patching this function.
    """
    return Settings()

