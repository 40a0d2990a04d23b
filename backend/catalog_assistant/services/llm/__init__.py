"""
Generative Model Layer

Wraps the chat model behind a provider-agnostic interface so the RAG pipeline
can be tested with a scripted model.
"""

from catalog_assistant.services.llm.base import ChatModel
from catalog_assistant.services.llm.openai_chat import OpenAIChatModel, get_chat_model

__all__ = [
    "ChatModel",
    "OpenAIChatModel",
    "get_chat_model",
]
