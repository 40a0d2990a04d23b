"""
Embedding Provider

Converts text into a fixed-dimension vector with OpenAI's
text-embedding-3-small model (through LangChain's OpenAIEmbeddings).

The same provider embeds catalog products during sync and user queries at chat
time, so both live in the same vector space and cosine distance is meaningful.
"""

import logging
from abc import ABC, abstractmethod

from langchain_openai import OpenAIEmbeddings

from catalog_assistant.core.config import get_settings
from catalog_assistant.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """Abstract base class for embedding providers."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Raises:
            UpstreamError: if the provider fails or returns no vector
        """
        ...


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embedding provider backed by langchain_openai.OpenAIEmbeddings."""

    def __init__(self, embeddings: OpenAIEmbeddings | None = None):
        if embeddings is None:
            settings = get_settings()
            embeddings = OpenAIEmbeddings(
                model=settings.embedding_model,
                dimensions=settings.embedding_dimensions,
                openai_api_key=settings.openai_api_key,
            )
        self._embeddings = embeddings

    async def embed(self, text: str) -> list[float]:
        try:
            vector = await self._embeddings.aembed_query(text)
        except Exception as e:
            logger.error("[RAG] Embedding request failed: %s", e)
            raise UpstreamError(f"Embedding provider error: {e}") from e

        if not vector:
            raise UpstreamError("Embedding provider returned an empty vector")

        logger.debug("[RAG] Embedding generated: %d dimensions", len(vector))
        return list(vector)


# ── Singleton ─────────────────────────────────────────────────────────────────

_provider: EmbeddingProvider | None = None


def get_embedding_provider() -> EmbeddingProvider:
    """Get or create the embedding provider singleton."""
    global _provider
    if _provider is None:
        _provider = OpenAIEmbeddingProvider()
    return _provider
