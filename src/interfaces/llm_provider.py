"""Abstract base class for LLM service providers.

Defines the contract for the chat model that answers questions over
retrieved context.  Replies are streamed so the HTTP layer can forward
tokens as they arrive.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


# Concrete implementation: OpenAILLMProvider (src/providers/llm/)
class ILLMProvider(ABC):
    """Contract for chat-completion services."""

    @abstractmethod
    def stream_chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> AsyncIterator[str]:
        """Stream a chat completion fragment by fragment.

        Parameters
        ----------
        messages:
            Chat messages as ``{"role": ..., "content": ...}`` dicts, system
            message first.
        temperature:
            Sampling temperature.
        max_tokens:
            Upper bound on generated tokens.

        Returns
        -------
        AsyncIterator[str]
            Non-empty text fragments in generation order.  Closing the
            iterator early abandons the underlying request.

        Raises
        ------
        src.utils.errors.LLMError
            If the request fails or the stream breaks.
        """

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """Return a whole (non-streamed) chat completion.

        Raises
        ------
        src.utils.errors.LLMError
            If the API call fails or returns an empty response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""
