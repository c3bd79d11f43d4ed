"""LLM provider adapters.

OpenAILLMProvider (src/providers/llm/openai_provider.py) implements
ILLMProvider for gpt-4o-mini and any OpenAI-compatible endpoint.  main.py
creates it at startup and stores it on app.state.
"""

from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider"]
