"""Configuration module — exports Settings, the loaders, and a module-level singleton."""

from src.config.loader import (
    load_config,
    ocr_test_page_ranges,
    predefined_page_configs,
    resolve_page_ranges,
)
from src.config.settings import Settings

settings = Settings()

__all__ = [
    "Settings",
    "load_config",
    "ocr_test_page_ranges",
    "predefined_page_configs",
    "resolve_page_ranges",
    "settings",
]
