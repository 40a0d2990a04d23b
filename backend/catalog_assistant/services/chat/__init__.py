"""
Chat Pipeline

Turns a free-text message into either a grounded answer or a priced quote:
intent classification, quote item extraction, quote order building and
response shaping. The entry point is ChatService.process_message().
"""

from catalog_assistant.services.chat.intent import classify_intent
from catalog_assistant.services.chat.extractor import extract_quote_items
from catalog_assistant.services.chat.service import ChatService, get_chat_service

__all__ = [
    "classify_intent",
    "extract_quote_items",
    "ChatService",
    "get_chat_service",
]
