# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
# Each module defines a FastAPI APIRouter for a specific feature:
#   - health.py: GET / and GET /health
#   - embeddings.py: POST /embeddings (store a text chunk)
#   - ask.py: POST /ask (grounded question answering)
# Plus the cross-cutting pieces:
#   - deps.py: ProviderClients dependency
#   - middleware.py: CORS headers, preflight short-circuit, request log
#   - errors.py: JSON error bodies for every failure path
# =============================================================================
