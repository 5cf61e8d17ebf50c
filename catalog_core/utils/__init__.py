"""Shared utilities: logging, JSON and text helpers."""

from .json_utils import dumps, loads, to_jsonable
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
)
from .text_utils import clean_text, derive_code, is_blank, slugify

__all__ = [
    "AzureQueueHandler",
    "ContextAwareLogger",
    "TenantContextFilter",
    "configure_logging",
    "get_logger",
    "dumps",
    "loads",
    "to_jsonable",
    "clean_text",
    "derive_code",
    "is_blank",
    "slugify",
]
