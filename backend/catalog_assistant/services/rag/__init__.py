"""
RAG (Retrieval-Augmented Generation) Pipeline

Grounds chat answers in the product catalog by:
1. Embedding catalog products during sync and user text at query time
2. Retrieving the nearest active, in-stock products by cosine distance
3. Formatting those products as context for the chat model prompt
"""

from catalog_assistant.services.rag.context import assemble_context, build_product_text
from catalog_assistant.services.rag.retriever import RetrievalEngine

__all__ = [
    "assemble_context",
    "build_product_text",
    "RetrievalEngine",
]
