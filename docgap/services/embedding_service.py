"""Embedding generation via PydanticAI Gateway."""

from typing import List, Protocol

import logfire
from pydantic_ai import Embedder


class EmbeddingError(Exception):
    """Raised when the embedding service fails or returns no vector."""


class EmbeddingClient(Protocol):
    """Protocol for turning text into an embedding vector."""

    async def embed_document(self, text: str) -> List[float]:
        """Embed a documentation page."""
        ...

    async def embed_query(self, text: str) -> List[float]:
        """Embed an issue search query."""
        ...


class GatewayEmbeddingClient:
    """EmbeddingClient backed by a PydanticAI ``Embedder``.

    Uses the configured embedding model (e.g.
    gateway/openai:text-embedding-3-small) routed through the gateway API key.
    """

    def __init__(self, model: str):
        self._model = model
        self._embedder = Embedder(model)

    async def embed_document(self, text: str) -> List[float]:
        try:
            with logfire.span("embedding_document", model=self._model):
                result = await self._embedder.embed_documents([text])
        except Exception as e:
            raise EmbeddingError(f"Document embedding failed: {e}") from e
        return self._first_vector(result.embeddings)

    async def embed_query(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed an empty query")
        try:
            with logfire.span("embedding_query", model=self._model):
                result = await self._embedder.embed_query(text)
        except Exception as e:
            raise EmbeddingError(f"Query embedding failed: {e}") from e
        return self._first_vector(result.embeddings)

    @staticmethod
    def _first_vector(embeddings) -> List[float]:
        if not embeddings or not embeddings[0]:
            raise EmbeddingError("Embedding service returned no vector")
        return list(embeddings[0])
