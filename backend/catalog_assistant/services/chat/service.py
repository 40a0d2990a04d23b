"""
Chat Service

The single entry point of the assistant core: process_message(user_id, message).

Pipeline:
1. CLASSIFY – the intent decision table labels the message
2. QUOTE    – quote requests are parsed into (hint, quantity) items, resolved
              against the catalog and persisted as a quote order
3. RAG      – everything else embeds the message, retrieves similar products,
              formats them as context and asks the chat model for an answer
4. SHAPE    – the result is returned as { response, products?, quote? }

Each call is independent: no conversation state is kept between messages.
"""

import logging
import uuid

from catalog_assistant.core.config import get_settings
from catalog_assistant.core.errors import CatalogAssistantError, InternalError
from catalog_assistant.services.chat.extractor import extract_quote_items
from catalog_assistant.services.chat.intent import classify_intent
from catalog_assistant.services.chat.prompts import compile_rag_prompt
from catalog_assistant.services.chat.quote_builder import QuoteOrderBuilder
from catalog_assistant.services.chat.response import (
    ChatResult,
    compose_answer,
    compose_message,
    compose_quote,
)
from catalog_assistant.services.llm.base import ChatModel
from catalog_assistant.services.llm.openai_chat import get_chat_model
from catalog_assistant.services.models import IntentLabel
from catalog_assistant.services.rag.context import assemble_context
from catalog_assistant.services.rag.embeddings import EmbeddingProvider, get_embedding_provider
from catalog_assistant.services.rag.retriever import RetrievalEngine
from catalog_assistant.services.store import ProductStore, get_product_store

logger = logging.getLogger(__name__)

CLARIFICATION_MESSAGE = (
    "No pude identificar qué productos deseas cotizar. Por favor, especifica el "
    "producto y la cantidad. Ejemplo: \"Cotízame 10 tarjetas HID ProxCard II\""
)


class ChatService:
    """Intent -> retrieval -> answer or quote."""

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        store: ProductStore,
        chat_model: ChatModel,
        max_products: int = 5,
        quote_concurrency: int = 1,
    ):
        self.retrieval = RetrievalEngine(embeddings, store)
        self.quotes = QuoteOrderBuilder(self.retrieval, store, concurrency=quote_concurrency)
        self.chat_model = chat_model
        self.max_products = max_products

    async def process_message(self, user_id: uuid.UUID, message: str) -> ChatResult:
        """
        Answer one user message.

        Args:
            user_id: Caller identity (validated by the HTTP layer)
            message: Non-empty user message (validated by the HTTP layer)

        Returns:
            ChatResult with the response text and optional products / quote
        """
        intent = classify_intent(message)
        logger.info(
            "[Chat] Intent detected: %s (%.2f)", intent.label.value, intent.confidence
        )

        try:
            if intent.label is IntentLabel.QUOTE_REQUEST:
                return await self.handle_quote_request(user_id, message)
            return await self.handle_rag_query(message)
        except CatalogAssistantError:
            raise
        except Exception as e:
            logger.exception("[Chat] Unexpected failure while processing message")
            raise InternalError("Error interno al procesar el mensaje") from e

    async def handle_rag_query(self, message: str) -> ChatResult:
        matches = await self.retrieval.search(message, k=self.max_products)
        context = assemble_context(matches)
        prompt = compile_rag_prompt(context, message)
        answer = await self.chat_model.generate(prompt)
        return compose_answer(answer, matches)

    async def handle_quote_request(self, user_id: uuid.UUID, message: str) -> ChatResult:
        items = extract_quote_items(message)
        if not items:
            logger.info("[Chat] Quote request without recognizable items")
            return compose_message(CLARIFICATION_MESSAGE)

        logger.info("[Chat] Quoting %d item(s)", len(items))
        outcome = await self.quotes.build_quote(user_id, items)
        return compose_quote(outcome)


# ── Singleton ─────────────────────────────────────────────────────────────────

_chat_service: ChatService | None = None


def get_chat_service() -> ChatService:
    """Get or create the chat service wired to the production collaborators."""
    global _chat_service
    if _chat_service is None:
        settings = get_settings()
        _chat_service = ChatService(
            embeddings=get_embedding_provider(),
            store=get_product_store(),
            chat_model=get_chat_model(),
            max_products=settings.max_products_search,
            quote_concurrency=settings.quote_resolution_concurrency,
        )
    return _chat_service
