# =============================================================================
# RAG Bridge
# =============================================================================
# A small HTTP service that stores text chunks as embeddings in a vector
# database and answers questions grounded in the closest stored chunk.
#
# Package structure:
#   ragbridge/
#   ├── api/          → FastAPI routers, middleware, error handlers
#   ├── models/       → Pydantic V2 request/response schemas
#   ├── services/     → Provider clients, ingestion, answering
#   ├── config.py     → pydantic-settings configuration
#   ├── errors.py     → Exception taxonomy
#   └── main.py       → Application factory
# =============================================================================
