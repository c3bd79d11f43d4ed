"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  — static page ranges and presets checked into the repo
  2. .env file           — local developer overrides (not committed)
  3. Environment vars    — set at deploy time

:func:`load_config` reads the YAML file first, then deep-merges
environment-based values on top.  :func:`resolve_page_ranges` and
:func:`predefined_page_configs` turn the ``ingestion`` section into
validated :class:`~src.models.document.PageRange` models.
"""

from pathlib import Path
from typing import Any

import yaml

from src.config.settings import Settings
from src.models.document import PageRange
from src.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml") -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "document": {
            "path": settings.document_path,
            "source": settings.document_source,
        },
        "index": {
            "name": settings.index_name,
            "dimension": settings.embedding_dimension,
            "metric": settings.index_metric,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


# ------------------------------------------------------------------
# Page ranges
# ------------------------------------------------------------------


def _parse_ranges(raw: Any, where: str) -> list[PageRange]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigurationError(message=f"{where} must be a list of page ranges")
    try:
        return [PageRange.model_validate(item) for item in raw]
    except ValueError as exc:
        raise ConfigurationError(message=f"Invalid page range in {where}: {exc}") from exc


def resolve_page_ranges(config: dict) -> list[PageRange]:
    """Return the static page ranges under ``ingestion.page_ranges``.

    An empty list means "every page of the document".
    """
    ingestion = config.get("ingestion") or {}
    return _parse_ranges(ingestion.get("page_ranges"), "ingestion.page_ranges")


def predefined_page_configs(config: dict) -> dict[str, list[PageRange]]:
    """Return the named presets under ``ingestion.presets``."""
    ingestion = config.get("ingestion") or {}
    presets = ingestion.get("presets") or {}
    return {
        name: _parse_ranges(ranges, f"ingestion.presets.{name}")
        for name, ranges in presets.items()
    }


def ocr_test_page_ranges(config: dict) -> list[PageRange]:
    """Return the pages OCR-ed by the OCR smoke test (``ocr_test.pages``).

    Defaults to pages 1-2 when the section is absent.
    """
    ocr_test = config.get("ocr_test") or {}
    ranges = _parse_ranges(ocr_test.get("pages"), "ocr_test.pages")
    return ranges or [PageRange(start=1, end=2, description="Test pages for Bengali OCR")]
