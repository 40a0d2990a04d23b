"""
Retrieval Engine

Finds the catalog products that are semantically closest to a piece of text.

How retrieval works:
1. The query text is converted into a vector by the embedding provider.
2. The product store compares it against stored product vectors by cosine
   distance (0 = identical, 2 = opposite), considering only active, in-stock rows.
3. The k nearest products come back ordered by ascending distance.

Callers see relevance as 1 - distance.
"""

import logging

from catalog_assistant.services.models import ProductMatch
from catalog_assistant.services.rag.embeddings import EmbeddingProvider
from catalog_assistant.services.store import ProductStore

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Embeds query text and runs ranked similarity search against the catalog."""

    def __init__(self, embeddings: EmbeddingProvider, store: ProductStore):
        self.embeddings = embeddings
        self.store = store

    async def search(self, query_text: str, k: int = 5) -> list[ProductMatch]:
        """
        Retrieve the k catalog products closest to query_text.

        Args:
            query_text: Free text (a whole message or a single product hint)
            k: Maximum number of results, at least 1

        Returns:
            Matches ordered by non-decreasing distance (possibly empty)
        """
        if k < 1:
            raise ValueError("k must be at least 1")

        vector = await self.embeddings.embed(query_text)
        matches = await self.store.similarity_search(vector, k)

        # sorted() is stable, so the store's tie order survives
        ranked = sorted(matches, key=lambda m: m.distance)[:k]
        logger.info("[RAG] Retrieved %d products for: %s", len(ranked), query_text[:80])
        return ranked
