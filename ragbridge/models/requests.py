# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming INTO the API.
#
# Field names on the wire are camelCase (`chunkId`, `documentID`) for the
# existing frontend; Python code uses snake_case via aliases.
#
# Required fields are typed Optional on purpose: a missing `text` or
# `question` must produce the service's own 400 message, not Pydantic's
# generic "field required".
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class EmbeddingRequest(BaseModel):
    """
    Request body for POST /embeddings: store one text chunk.

    Example:
        {"text": "The sky is blue.", "chunkId": "doc1"}
    """

    text: str | None = Field(
        default=None,
        description="The text chunk to embed and store",
        examples=["The sky is blue."],
    )

    # Omit to let the server generate a time-derived id.
    # Re-using an id overwrites the stored chunk.
    chunk_id: str | None = Field(
        default=None,
        alias="chunkId",
        description="Id to store the chunk under. Generated if omitted.",
        examples=["doc1"],
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [{"text": "The sky is blue.", "chunkId": "doc1"}]
        },
    )


class AskRequest(BaseModel):
    """
    Request body for POST /ask: ask a question about a stored chunk.

    Example:
        {"question": "What color is the sky?", "documentID": "doc1"}
    """

    question: str | None = Field(
        default=None,
        description="The natural language question to answer",
        examples=["What color is the sky?"],
    )

    document_id: str | None = Field(
        default=None,
        alias="documentID",
        description=(
            "Id of the chunk expected to hold the answer. When it is not "
            "among the closest matches, the best match is used if similar enough."
        ),
        examples=["doc1"],
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"question": "What color is the sky?", "documentID": "doc1"}
            ]
        },
    )
