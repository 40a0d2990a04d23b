"""
OpenAI Chat Completions API Provider

Sends the assembled RAG prompt as a single user message:
- client.chat.completions.create()
- response.choices[0].message.content
"""

import logging

from openai import AsyncOpenAI, OpenAIError

from catalog_assistant.core.config import get_settings
from catalog_assistant.core.errors import UpstreamError
from catalog_assistant.services.llm.base import ChatModel

logger = logging.getLogger(__name__)


class OpenAIChatModel(ChatModel):
    """Chat model backed by the OpenAI Chat Completions API."""

    provider_name = "openai_chat"

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ):
        settings = get_settings()
        self.client = client or AsyncOpenAI(api_key=settings.openai_api_key)
        self.model = model or settings.openai_model
        self.temperature = (
            settings.chat_temperature if temperature is None else temperature
        )
        self.max_output_tokens = max_output_tokens or settings.chat_max_output_tokens

    async def generate(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_completion_tokens=self.max_output_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error("[LLM] Generation failed (model=%s): %s", self.model, e)
            raise UpstreamError(f"Chat model error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise UpstreamError("Empty response from OpenAI Chat Completions API")

        logger.info("[LLM] model=%s provider=%s", self.model, self.provider_name)
        return content.strip()


# ── Singleton ─────────────────────────────────────────────────────────────────

_chat_model: ChatModel | None = None


def get_chat_model() -> ChatModel:
    """Get or create the chat model singleton."""
    global _chat_model
    if _chat_model is None:
        _chat_model = OpenAIChatModel()
    return _chat_model
