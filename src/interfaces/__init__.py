"""Public interface definitions for all external service providers.

Every external API or engine in banglaRAG is accessed through the abstract
base classes defined in this package.  Concrete adapters live in
``src/providers/`` and are wired together in ``src/main.py`` (HTTP) and
``src/cli/ingest.py`` (CLI).

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementation (in src/providers/)
    ─────────────────────────────────────────────────────────────────────
    IEmbeddingProvider         →  OpenAIEmbeddingProvider
    IVectorStoreProvider       →  ChromaDBProvider
    IOCRProvider               →  TesseractOCRProvider
    ILLMProvider               →  OpenAILLMProvider
"""

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.ocr_provider import IOCRProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "ILLMProvider",
    "IOCRProvider",
    "IVectorStoreProvider",
]
