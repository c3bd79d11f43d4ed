"""Shared pytest fixtures for the banglaRAG test suite."""

from __future__ import annotations

import hashlib
import struct
from pathlib import Path
from typing import Any

import pytest

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.rag import IndexStats, VectorMatch, VectorRecord
from src.utils.errors import IndexNotFoundError, RAGError
from src.utils.similarity import cosine_similarity


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return a minimal configuration dict shaped like config/config.yaml."""
    return {
        "app": {"name": "banglaRAG", "version": "0.1.0"},
        "ingestion": {
            "page_ranges": [{"start": 3, "end": 4, "description": "Configured pages"}],
            "presets": {
                "SAMPLE_PAGES": [{"start": 1, "end": 5, "description": "Sample pages for testing"}],
                "MAIN_STORIES": [
                    {"start": 5, "end": 15, "description": "Story 1"},
                    {"start": 16, "end": 25, "description": "Story 2"},
                ],
            },
        },
        "ocr_test": {
            "pages": [{"start": 1, "end": 2, "description": "Test pages for Bengali OCR"}],
        },
    }


@pytest.fixture
def mock_settings() -> Any:
    """Return Settings with a dummy API key, isolated from any local .env."""
    from src.config.settings import Settings

    return Settings(
        _env_file=None,
        openai_api_key="sk-test-key",
        chromadb_persist_dir="/tmp/test_chromadb",
        app_env="test",
    )


# ---------------------------------------------------------------------------
# Text fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_bengali_text() -> str:
    """A few Bengali sentences as they come out of a clean OCR pass."""
    return (
        "অনুপমের বয়স সাতাশ বছর। "
        "তার মামা তাকে সব সময় আগলে রাখতেন। "
        "কল্যাণীর বাবা শম্ভুনাথ সেন একজন ডাক্তার ছিলেন। "
        "বিয়ের দিন শম্ভুনাথ বিয়ে ভেঙে দেন। "
        "অনুপম শেষ পর্যন্ত কল্যাণীর কথাই ভাবে।"
    )


# ---------------------------------------------------------------------------
# RAG fixtures
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 64


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Generate a deterministic unit vector with non-negative components.

    Non-negative components keep every pairwise cosine in ``[0, 1]``, the
    same range a cosine-metric index reports.
    """
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    raw = digest
    while len(raw) < dim * 2:
        raw += hashlib.sha256(raw).digest()
    values = [float(v) + 1.0 for v in struct.unpack(f"<{dim}H", raw[: dim * 2])]
    magnitude = sum(v * v for v in values) ** 0.5
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider for tests."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.extend(texts)
        return [_hash_to_vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        return _hash_to_vector(text)

    def get_dimension(self) -> int:
        return _EMBEDDING_DIM

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


class MockVectorStore(IVectorStoreProvider):
    """In-memory vector index backed by a dict of records.

    Queries rank every stored record by cosine similarity to the query
    vector.  Readiness is immediate.
    """

    def __init__(self, exists: bool = True, dimension: int = _EMBEDDING_DIM) -> None:
        self._exists = exists
        self._dimension = dimension
        self.records: dict[str, VectorRecord] = {}

    async def index_exists(self) -> bool:
        return self._exists

    async def create_index(self, dimension: int, metric: str = "cosine") -> None:
        self._exists = True
        self._dimension = dimension
        self.records.clear()

    async def delete_index(self) -> None:
        self._exists = False
        self.records.clear()

    async def is_index_ready(self) -> bool:
        return self._exists

    async def describe_stats(self) -> IndexStats:
        self._require_index()
        return IndexStats(total_record_count=len(self.records), dimension=self._dimension)

    async def upsert(self, records: list[VectorRecord]) -> int:
        self._require_index()
        for record in records:
            if len(record.values) != self._dimension:
                raise RAGError(message="dimension mismatch", provider_name="mock-store")
            self.records[record.id] = record
        return len(records)

    async def query(
        self,
        vector: list[float],
        top_k: int = 10,
        include_metadata: bool = True,
    ) -> list[VectorMatch]:
        self._require_index()
        ranked = sorted(
            (
                VectorMatch(
                    id=record.id,
                    score=max(0.0, cosine_similarity(vector, record.values)),
                    metadata=dict(record.metadata) if include_metadata else {},
                )
                for record in self.records.values()
            ),
            key=lambda match: match.score,
            reverse=True,
        )
        return ranked[:top_k]

    def get_index_name(self) -> str:
        return "test-index"

    def get_provider_name(self) -> str:
        return "mock-store"

    def is_available(self) -> bool:
        return True

    def _require_index(self) -> None:
        if not self._exists:
            raise IndexNotFoundError(
                message='Index "test-index" does not exist. Please create it first',
                provider_name="mock-store",
            )


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def mock_vector_store() -> MockVectorStore:
    return MockVectorStore()


@pytest.fixture
def missing_index_store() -> MockVectorStore:
    """A vector store whose index has not been created."""
    return MockVectorStore(exists=False)


# ---------------------------------------------------------------------------
# PDF fixtures
# ---------------------------------------------------------------------------


def _page_text(page: int) -> str:
    return (
        f"Page {page} of the sample document. "
        "It has enough words on it to pass the minimum page length check. "
        "Every sentence ends with a full stop."
    )


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    """Write a three-page PDF with an English text layer and return its path."""
    import fitz

    path = tmp_path / "sample.pdf"
    doc = fitz.open()
    for page in range(1, 4):
        pdf_page = doc.new_page()
        pdf_page.insert_textbox(fitz.Rect(72, 72, 520, 760), _page_text(page), fontsize=11)
    doc.save(str(path))
    doc.close()
    return path
