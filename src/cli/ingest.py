# =============================================================================
# src/cli/ingest.py — CLI for the banglaRAG knowledge base
# =============================================================================
#
# Operator commands for building and inspecting the vector index that backs
# the chat endpoint, without starting the web server.
#
#   ingest          — OCR the textbook, chunk, embed and upsert
#   create-index    — create the index if it does not exist
#   recreate-index  — delete and recreate the index (drops every vector)
#   stats           — print record count and dimension
#   test-ocr        — OCR the test pages and print chunk previews
#   evaluate        — score a question/answer pair
#   ask             — answer a question from the index and score the answer
#
# Heavy imports (openai, chromadb, PyMuPDF) are deferred into the builders.
# =============================================================================

"""Standalone CLI for the banglaRAG vector index.

Usage::

    python -m src.cli.ingest create-index
    python -m src.cli.ingest ingest --pages 1-20 --pages 41-55
    python -m src.cli.ingest ingest --preset SAMPLE_PAGES
    python -m src.cli.ingest stats
    python -m src.cli.ingest test-ocr
    python -m src.cli.ingest evaluate --query "..." --answer "..."
    python -m src.cli.ingest ask "অনুপমের ভাষায় সুপুরুষ কাকে বলা হয়েছে?"
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from src.config.settings import Settings
from src.models.document import PageRange
from src.utils.errors import BanglaRAGError

# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _build_vector_store(app_settings: Settings):  # noqa: ANN202
    from src.providers.vector_store.chromadb_provider import ChromaDBProvider

    return ChromaDBProvider(
        persist_directory=app_settings.chromadb_persist_dir,
        index_name=app_settings.index_name,
    )


def _build_embedding_provider(app_settings: Settings):  # noqa: ANN202
    from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

    return OpenAIEmbeddingProvider(settings=app_settings)


def _build_processor(app_settings: Settings):  # noqa: ANN202
    from src.providers.ocr.tesseract_provider import TesseractOCRProvider
    from src.services.ingestion.chunker import TextChunker
    from src.services.ingestion.document_processor import DocumentProcessor
    from src.services.ingestion.ocr_extractor import OCRExtractor
    from src.services.ingestion.page_converter import PageImageConverter

    return DocumentProcessor(
        converter=PageImageConverter(
            temp_dir=app_settings.ocr_temp_dir, dpi=app_settings.ocr_render_dpi
        ),
        extractor=OCRExtractor(
            TesseractOCRProvider(tesseract_cmd=app_settings.tesseract_cmd),
            min_page_chars=app_settings.ocr_min_page_chars,
        ),
        chunker=TextChunker(
            chunk_size=app_settings.chunk_size,
            overlap=app_settings.chunk_overlap,
            min_chunk_size=app_settings.min_chunk_size,
        ),
    )


def _build_index_service(app_settings: Settings):  # noqa: ANN202
    from src.services.index_service import IndexService

    return IndexService(
        vector_store=_build_vector_store(app_settings),
        dimension=app_settings.embedding_dimension,
        metric=app_settings.index_metric,
        poll_interval=app_settings.index_poll_interval,
        max_ready_attempts=app_settings.index_max_ready_attempts,
        max_delete_attempts=app_settings.index_max_delete_attempts,
    )


def _build_retrieval(app_settings: Settings):  # noqa: ANN202
    """Return a ``(ContextRetriever, RAGEvaluator)`` pair sharing one embedder."""
    from src.services.context_retriever import ContextRetriever
    from src.services.rag_evaluator import RAGEvaluator

    embedding_provider = _build_embedding_provider(app_settings)
    retriever = ContextRetriever(
        embedding_provider=embedding_provider,
        vector_store=_build_vector_store(app_settings),
        top_k=app_settings.retrieval_top_k,
        threshold=app_settings.retrieval_threshold,
        fallback_threshold=app_settings.retrieval_fallback_threshold,
    )
    return retriever, RAGEvaluator(embedding_provider=embedding_provider, retriever=retriever)


def _parse_page_range(value: str) -> PageRange:
    """Parse ``"7"`` or ``"10-25"`` into a :class:`PageRange` (argparse type)."""
    start, sep, end = value.partition("-")
    try:
        first = int(start)
        last = int(end) if sep else first
        return PageRange(start=first, end=last)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid page range {value!r}: {exc}") from exc


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_ingest(args: argparse.Namespace, app_settings: Settings) -> int:
    """Run the full ingestion pipeline."""
    from src.config.loader import load_config, predefined_page_configs, resolve_page_ranges
    from src.services.ingestion.ingestion_service import IngestionService

    config = load_config(args.config)
    page_ranges: list[PageRange] | None = args.pages
    if args.preset:
        presets = predefined_page_configs(config)
        if args.preset not in presets:
            print(f"Unknown preset: {args.preset}. Choose from: {', '.join(sorted(presets))}")
            return 1
        page_ranges = presets[args.preset]

    service = IngestionService(
        processor=_build_processor(app_settings),
        embedding_provider=_build_embedding_provider(app_settings),
        vector_store=_build_vector_store(app_settings),
        document_path=args.file or app_settings.document_path,
        source=app_settings.document_source,
        languages=app_settings.ocr_languages,
        default_page_ranges=resolve_page_ranges(config),
        batch_size=app_settings.ingest_batch_size,
        batch_delay=app_settings.ingest_batch_delay,
        strategy=args.strategy,
    )

    ranges = service.resolve_page_ranges(page_ranges)
    label = ", ".join(f"{r.start}-{r.end}" for r in ranges) or "all pages"
    print(f"Ingesting {args.file or app_settings.document_path} ({label})...")

    result = await service.ingest(page_ranges)

    print("Document ingestion completed successfully")
    print(f"  Chunks processed: {result.chunks_processed}")
    print(f"  Total vectors:    {result.index_stats.total_record_count}")
    print(f"  Dimension:        {result.index_stats.dimension}")
    print(f"  Time:             {result.ingestion_time}s")
    return 0


async def _handle_create_index(app_settings: Settings) -> int:
    result = await _build_index_service(app_settings).create_index()
    print(result["message"])
    return 0


async def _handle_recreate_index(args: argparse.Namespace, app_settings: Settings) -> int:
    if not args.yes:
        answer = input(f'Delete every vector in "{app_settings.index_name}"? [y/N] ')
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted.")
            return 1
    result = await _build_index_service(app_settings).recreate_index()
    print(result["message"])
    return 0


async def _handle_stats(app_settings: Settings) -> int:
    """Display index statistics."""
    vector_store = _build_vector_store(app_settings)
    if not await vector_store.index_exists():
        print(f'Index "{app_settings.index_name}" does not exist. Run create-index first.')
        return 1

    stats = await vector_store.describe_stats()
    print("Index Statistics")
    print("=" * 40)
    print(f"  Index:          {app_settings.index_name}")
    print(f"  Total vectors:  {stats.total_record_count}")
    print(f"  Dimension:      {stats.dimension}")
    return 0


async def _handle_test_ocr(args: argparse.Namespace, app_settings: Settings) -> int:
    from src.config.loader import load_config, ocr_test_page_ranges
    from src.services.ingestion.document_processor import DocumentProcessor
    from src.utils.text_normalizer import excerpt

    processor = _build_processor(app_settings)
    chunks = await processor.process(
        args.file or app_settings.document_path,
        page_ranges=ocr_test_page_ranges(load_config(args.config)),
        languages=app_settings.ocr_languages,
        source=app_settings.document_source,
    )
    stats = DocumentProcessor.get_processing_stats(chunks)

    print("OCR test completed successfully")
    print(f"  Chunks created:   {stats.total_chunks}")
    print(f"  Total characters: {stats.total_characters}")
    for chunk in chunks[:3]:
        print(f"\n  [page {chunk.page}, chunk {chunk.chunk_index}, {chunk.char_count} chars]")
        print(f"  {excerpt(chunk.content, 200)}")
    return 0


async def _handle_evaluate(args: argparse.Namespace, app_settings: Settings) -> int:
    _, evaluator = _build_retrieval(app_settings)
    evaluation = await evaluator.evaluate(args.query, args.answer, contexts=args.context)
    print(evaluation.model_dump_json(indent=2))
    return 0


async def _handle_ask(args: argparse.Namespace, app_settings: Settings) -> int:
    from src.providers.llm.openai_provider import OpenAILLMProvider
    from src.services.chat_service import ChatService

    retriever, evaluator = _build_retrieval(app_settings)
    chat = ChatService(
        llm=OpenAILLMProvider(settings=app_settings),
        retriever=retriever,
        evaluator=evaluator,
        history_window=app_settings.chat_history_window,
        temperature=app_settings.chat_temperature,
        max_tokens=app_settings.chat_max_tokens,
    )
    event = await chat.answer(args.question)

    print(event.content)
    if event.evaluation is not None:
        print()
        print(f"  Groundedness: {event.evaluation.groundedness.score}")
        print(f"  Relevance:    {event.evaluation.relevance.score}")
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.ingest",
        description="Manage the banglaRAG vector index.",
    )
    parser.add_argument(
        "--config", default="config/config.yaml", help="Path to the YAML configuration"
    )
    subparsers = parser.add_subparsers(dest="command", help="Index commands")

    # -- ingest --
    ingest_parser = subparsers.add_parser("ingest", help="OCR, chunk, embed and store the PDF")
    ingest_parser.add_argument("--file", help="PDF to ingest (default: DOCUMENT_PATH)")
    page_group = ingest_parser.add_mutually_exclusive_group()
    page_group.add_argument(
        "--pages",
        action="append",
        type=_parse_page_range,
        help="Page range such as 10-25; repeat for several ranges",
    )
    page_group.add_argument("--preset", help="Named preset from config.yaml")
    ingest_parser.add_argument(
        "--strategy",
        choices=("ocr", "text"),
        default="ocr",
        help="Extract with OCR (default) or from the PDF text layer",
    )

    # -- index management --
    subparsers.add_parser("create-index", help="Create the index if it does not exist")
    recreate_parser = subparsers.add_parser(
        "recreate-index", help="Delete and recreate the index"
    )
    recreate_parser.add_argument(
        "--yes", "-y", action="store_true", help="Skip confirmation prompt"
    )
    subparsers.add_parser("stats", help="Show index statistics")

    # -- test-ocr --
    ocr_parser = subparsers.add_parser("test-ocr", help="OCR the test pages and preview chunks")
    ocr_parser.add_argument("--file", help="PDF to read (default: DOCUMENT_PATH)")

    # -- evaluate --
    eval_parser = subparsers.add_parser("evaluate", help="Score a question/answer pair")
    eval_parser.add_argument("--query", required=True, help="The question")
    eval_parser.add_argument("--answer", required=True, help="The answer to score")
    eval_parser.add_argument(
        "--context",
        action="append",
        help="Context passage; repeat for several (default: retrieve from the index)",
    )

    # -- ask --
    ask_parser = subparsers.add_parser("ask", help="Answer a question from the index")
    ask_parser.add_argument("question", help="Question in Bengali or English")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _dispatch(args: argparse.Namespace, app_settings: Settings) -> int:
    if args.command == "ingest":
        return await _handle_ingest(args, app_settings)
    if args.command == "create-index":
        return await _handle_create_index(app_settings)
    if args.command == "recreate-index":
        return await _handle_recreate_index(args, app_settings)
    if args.command == "stats":
        return await _handle_stats(app_settings)
    if args.command == "test-ocr":
        return await _handle_test_ocr(args, app_settings)
    if args.command == "evaluate":
        return await _handle_evaluate(args, app_settings)
    return await _handle_ask(args, app_settings)


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    try:
        return await _dispatch(args, app_settings)
    except BanglaRAGError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def main() -> None:
    """CLI entry point for the index tool."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    from src.utils.logging import configure_logging

    app_settings = Settings()
    configure_logging(log_level=app_settings.log_level)

    sys.exit(asyncio.run(_run(args, app_settings)))


if __name__ == "__main__":
    main()
