"""
Abstract base class for generative chat models.

The chat pipeline only needs one operation: turn a fully assembled prompt into
answer text. Provider-specific request shapes live in the implementations.
"""

from abc import ABC, abstractmethod


class ChatModel(ABC):
    """Abstract base class for all chat model providers."""

    provider_name: str = "base"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate an answer for a complete prompt.

        Args:
            prompt: System instructions, product context and user question

        Returns:
            Non-empty answer text

        Raises:
            UpstreamError: if the provider fails or returns no text
        """
        ...
