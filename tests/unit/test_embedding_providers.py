"""Unit tests for the OpenAI embedding provider adapter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from src.config.settings import Settings
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from src.utils.errors import RAGError

_PATCH_TARGET = "src.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI"


def _response(*vectors: list[float]) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=v) for v in vectors]
    response.usage = MagicMock(total_tokens=42)
    return response


def _client(*responses: MagicMock) -> AsyncMock:
    client = AsyncMock()
    client.embeddings.create = AsyncMock(side_effect=list(responses))
    return client


class TestOpenAIEmbeddingProvider:
    def test_defaults(self, mock_settings: Settings) -> None:
        with patch(_PATCH_TARGET):
            provider = OpenAIEmbeddingProvider(mock_settings)
        assert provider.get_dimension() == 1536
        assert provider.get_provider_name() == "openai_embedding"
        assert provider.is_available() is True

    def test_unavailable_without_key(self) -> None:
        settings = Settings(_env_file=None, openai_api_key="")
        with patch(_PATCH_TARGET):
            assert OpenAIEmbeddingProvider(settings).is_available() is False

    def test_compatible_endpoint_label(self) -> None:
        settings = Settings(
            _env_file=None,
            openai_api_key="sk-test",
            openai_base_url="http://localhost:1234/v1",
            openai_embedding_model="custom-embedder",
            embedding_dimension=768,
        )
        with patch(_PATCH_TARGET) as mock_cls:
            provider = OpenAIEmbeddingProvider(settings)
        assert provider.get_provider_name() == "openai-compatible_embedding"
        assert provider.get_dimension() == 768
        assert mock_cls.call_args.kwargs["base_url"] == "http://localhost:1234/v1"

    @pytest.mark.asyncio
    async def test_embed(self, mock_settings: Settings) -> None:
        client = _client(_response([0.1] * 4, [0.2] * 4))
        with patch(_PATCH_TARGET, return_value=client):
            provider = OpenAIEmbeddingProvider(mock_settings)
            result = await provider.embed(["অনুপম", "কল্যাণী"])

        assert result == [[0.1] * 4, [0.2] * 4]
        kwargs = client.embeddings.create.call_args.kwargs
        assert kwargs["model"] == "text-embedding-ada-002"
        assert kwargs["input"] == ["অনুপম", "কল্যাণী"]

    @pytest.mark.asyncio
    async def test_embed_single(self, mock_settings: Settings) -> None:
        client = _client(_response([0.5] * 4))
        with patch(_PATCH_TARGET, return_value=client):
            provider = OpenAIEmbeddingProvider(mock_settings)
            assert await provider.embed_single("শম্ভুনাথ") == [0.5] * 4

    @pytest.mark.asyncio
    async def test_embed_empty_makes_no_call(self, mock_settings: Settings) -> None:
        client = _client()
        with patch(_PATCH_TARGET, return_value=client):
            provider = OpenAIEmbeddingProvider(mock_settings)
            assert await provider.embed([]) == []
        client.embeddings.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_api_error_becomes_rag_error(self, mock_settings: Settings) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        client = AsyncMock()
        client.embeddings.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=request)
        )
        with patch(_PATCH_TARGET, return_value=client):
            provider = OpenAIEmbeddingProvider(mock_settings)
            with pytest.raises(RAGError, match="API error"):
                await provider.embed(["x"])

    @pytest.mark.asyncio
    async def test_count_mismatch_raises(self, mock_settings: Settings) -> None:
        client = _client(_response([0.1] * 4))
        with patch(_PATCH_TARGET, return_value=client):
            provider = OpenAIEmbeddingProvider(mock_settings)
            with pytest.raises(RAGError, match="Expected 2 embeddings"):
                await provider.embed(["a", "b"])
