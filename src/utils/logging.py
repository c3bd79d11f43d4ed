"""Structured logging setup using structlog.

The same shared processor chain (context vars, log level, timestamps,
stack/exception info) feeds one of two renderers: a coloured
``ConsoleRenderer`` while developing, or a ``JSONRenderer`` in production.
The renderer follows ``APP_ENV`` (default ``"development"``) unless
``json_output`` forces JSON.

Standard-library ``logging`` is routed through the same formatter so that
uvicorn, httpx and chromadb output lines look like ours.  ChromaDB and the
OpenAI HTTP client are chatty at INFO, so they are raised to WARNING.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

# Third-party loggers that flood INFO with per-request lines.
_NOISY_LOGGERS = ("httpx", "httpcore", "chromadb", "openai", "PIL")


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors that run before rendering, regardless of output format."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _select_renderer(json_output: bool) -> structlog.types.Processor:
    """Return the JSON renderer in production, the console renderer otherwise."""
    app_env = os.environ.get("APP_ENV", "development")
    if json_output or app_env == "production":
        return structlog.processors.JSONRenderer()
    # Bengali text in log fields renders fine in the console renderer;
    # JSONRenderer escapes it, which is what log shippers expect.
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog with environment-appropriate rendering.

    Args:
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON output.  When False, JSON is still used if
                     ``APP_ENV=production``.

    Returns:
        A configured structlog BoundLogger.
    """
    shared = _shared_processors()
    renderer = _select_renderer(json_output)
    level = logging.getLevelName(log_level.upper())

    structlog.configure(
        processors=[*shared, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *shared,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a named structlog logger, configuring defaults on first use.

    Args:
        name: Logger name, typically ``__name__``.

    Returns:
        A structlog BoundLogger bound with ``logger_name``.
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
