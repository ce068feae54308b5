"""Configuration module."""

from facturier.config.logging import configure_logging, get_logger
from facturier.config.settings import (
    APISettings,
    DocumentSettings,
    PdfSettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "StorageSettings",
    "APISettings",
    "PdfSettings",
    "DocumentSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
