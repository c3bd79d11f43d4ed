# =============================================================================
# src/cli/__main__.py — Package Entry Point
# =============================================================================
#
# `python -m src.cli` delegates to the index CLI (ingest.py).
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.ingest import main

main()
