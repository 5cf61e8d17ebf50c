"""
Constants and enums for the catalog core.

This module centralizes the magic strings shared by configuration, logging,
the JSON contract and the transports.
"""

from enum import Enum


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    CATALOG_API_URL = "CATALOG_API_URL"
    DATABASE_URL = "DATABASE_URL"
    LOG_LEVEL = "LOG_LEVEL"
    BASE_LOCALE = "CATALOG_BASE_LOCALE"
    DEV_DB_PATH = "CATALOG_DEV_DB"


class QueueName(str, Enum):
    """Queue names used for structured log shipping."""

    LOGS = "logs-queue"


class ResponseKey(str, Enum):
    """Top-level keys of the catalog JSON contract."""

    CATALOGS = "catalogos"
    CATALOG = "catalogo"
    ITEMS = "items"
    COUNTS = "conteos"
    LOCALES = "idiomas"
    KIND = "tipo"
    ACTIVE = "activo"


DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_BASE_LOCALE = "es"
DEFAULT_COLOR = "#3b82f6"
DEFAULT_AMENITY_CATEGORY = "General"
