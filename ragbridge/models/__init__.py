# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
# Request/response bodies for the HTTP API. Service-layer results
# (IngestResult, AnswerFound, NotFoundOutcome) are plain dataclasses and
# are mapped onto these in the route handlers.
# =============================================================================
