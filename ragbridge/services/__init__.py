# =============================================================================
# Services Package — Business Logic
# =============================================================================
#   - embedder.py: OpenAI embedding generation (one string → one vector)
#   - vectorstore.py: Pluggable vector store protocol (Pinecone, Chroma)
#   - llm.py: Multi-provider chat abstraction (OpenAI-compatible, Anthropic)
#   - clients.py: ProviderClients holder, initialize-once semantics
#   - ingestion.py: Embed-and-upsert for POST /embeddings
#   - answering.py: Retrieve-and-answer state machine for POST /ask
# =============================================================================
