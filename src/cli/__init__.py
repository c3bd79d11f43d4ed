# =============================================================================
# src/cli/__init__.py — CLI Module Overview
# =============================================================================
#
# Command-line tools for operating banglaRAG outside the web server.
# Each submodule is runnable via `python -m src.cli.<module>`.
#
#   INDEX (ingest.py)
#      Builds and inspects the vector index: ingestion of the textbook,
#      index creation/recreation, statistics, the OCR smoke test and
#      offline answer evaluation.
#
# Architecture Notes:
#   - argparse for argument parsing.
#   - Heavy imports (openai, chromadb, PyMuPDF) are deferred inside
#     functions to keep startup fast for simple commands.
#   - The CLI constructs its own service dependencies rather than going
#     through the FastAPI lifespan.
# =============================================================================

"""CLI tools for banglaRAG.

- ``python -m src.cli.ingest`` — ingest the textbook, manage the index,
  run the OCR test and evaluate answers.
"""
