"""Application settings loaded from environment variables via pydantic-settings.

Values are read from two sources, in priority order:

  1. Environment variables, e.g. ``OPENAI_API_KEY=sk-abc123``
  2. The ``.env`` file in the project root (local development)

Field ``openai_api_key`` maps to ``OPENAI_API_KEY`` and so on.  Defaults
apply when neither source sets a value.  The ``.env`` file is not
committed; ``.env.example`` lists what can be set.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """banglaRAG application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === OpenAI ===
    # Empty key = "not configured"; the health endpoint reports the
    # providers as unavailable and ingestion/chat calls fail with RAGError.
    openai_api_key: str = ""
    openai_base_url: str = ""  # Custom base URL for OpenAI-compatible APIs
    openai_chat_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-ada-002"
    embedding_dimension: int = 1536

    # === Vector Index ===
    chromadb_persist_dir: str = "./data/chromadb"
    index_name: str = "hsc26-bangla"
    index_metric: str = "cosine"
    index_poll_interval: float = 10.0
    index_max_ready_attempts: int = 60
    index_max_delete_attempts: int = 30

    # === Source Document ===
    document_path: str = "data/hsc26.pdf"
    document_source: str = "hsc26.pdf"

    # === OCR ===
    ocr_languages: str = "ben+eng"
    ocr_temp_dir: str = "temp-pdf-images"
    ocr_render_dpi: int = 300
    ocr_min_page_chars: int = 50
    tesseract_cmd: str = ""  # Path to the tesseract binary when it is not on PATH

    # === Chunking ===
    chunk_size: int = 1000
    chunk_overlap: int = 200
    min_chunk_size: int = 50

    # === Ingestion ===
    ingest_batch_size: int = 10
    ingest_batch_delay: float = 1.0

    # === Retrieval ===
    retrieval_top_k: int = 10
    retrieval_threshold: float = 0.1
    retrieval_fallback_threshold: float = 0.05

    # === Chat ===
    chat_temperature: float = 0.7
    chat_max_tokens: int = 1000
    chat_history_window: int = 10

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_provider_label(self) -> str:
        """Name reported for the OpenAI-backed providers."""
        return "openai-compatible" if self.openai_base_url else "openai"
