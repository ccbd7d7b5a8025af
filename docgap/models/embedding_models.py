"""Models for cached page embeddings."""

from pydantic import BaseModel, Field

from docgap.constants import MAX_EMBEDDING_CONTENT_CHARS


class PageEmbeddingRecord(BaseModel):
    """Embedding of one documentation page, stored in the per-domain cache."""

    url: str
    title: str = ""
    description: str = ""
    content: str = Field(default="", max_length=MAX_EMBEDDING_CONTENT_CHARS)
    embedding: list[float]
