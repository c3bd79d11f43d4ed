"""Custom exception hierarchy for banglaRAG.

All application exceptions inherit from :class:`BanglaRAGError`, which
carries an optional ``provider_name`` so error handlers can tell which
external service (e.g. "openai", "tesseract", "chromadb") caused the
failure.

The hierarchy follows the stages of the ingestion and query pipeline:

    BanglaRAGError  (base -- catch-all for any banglaRAG error)
    +-- ConfigurationError       (startup / missing credentials or index name)
    +-- DocumentConversionError  (PDF page rasterization)
    +-- OCRExtractionError       (recognition engine start-up)
    +-- DocumentProcessingError  (convert -> OCR -> chunk produced nothing usable)
    +-- RAGError                 (embedding or vector-index call failed)
    |   +-- IndexNotFoundError   (the configured index does not exist)
    |   +-- IndexTimeoutError    (readiness / deletion polling exhausted)
    +-- IngestionError           (a batch failed during embed + upsert)
    +-- LLMError                 (chat completion failed)

Each class also declares ``status_code`` so the API middleware can map it
to an HTTP response without a lookup table.
"""


class BanglaRAGError(Exception):
    """Base exception for all banglaRAG errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets
    for log scanning, e.g. ``[chromadb] Collection not found``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(BanglaRAGError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Document ingestion: rasterize -> OCR -> chunk
# ---------------------------------------------------------------------------

class DocumentConversionError(BanglaRAGError):
    """Raised when a source document cannot be rasterized at all.

    Individual page failures are logged and skipped by the converter;
    this error means no OCR work can begin.
    """

    def __init__(
        self,
        message: str = "Failed to convert document pages to images",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class OCRExtractionError(BanglaRAGError):
    """Raised when the recognition engine cannot be started or is unusable."""

    def __init__(
        self,
        message: str = "OCR text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentProcessingError(BanglaRAGError):
    """Raised when document processing yields nothing that can be chunked."""

    def __init__(
        self,
        message: str = "Failed to process document",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# RAG / vector-index errors
# ---------------------------------------------------------------------------

class RAGError(BanglaRAGError):
    """Raised when an embedding or vector-index operation fails."""

    def __init__(
        self,
        message: str = "RAG pipeline operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IndexNotFoundError(RAGError):
    """Raised when the configured vector index has not been created yet."""

    status_code = 400

    def __init__(
        self,
        message: str = "Vector index does not exist",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IndexTimeoutError(RAGError):
    """Raised when index readiness or deletion polling runs out of attempts."""

    status_code = 504

    def __init__(
        self,
        message: str = "Timed out waiting for the vector index",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IngestionError(BanglaRAGError):
    """Raised when an ingestion batch fails; remaining batches are abandoned.

    The message names the batch and the record ids it covered so the run
    can be repeated (upsert-by-id makes a rerun overwrite earlier vectors).
    """

    def __init__(
        self,
        message: str = "Document ingestion failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class LLMError(BanglaRAGError):
    """Raised when a chat completion call fails or the stream breaks."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
