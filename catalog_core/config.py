"""
Runtime settings for the catalog core.

Each section reads its environment variable when the config is built; the
process keeps one ``AppConfig`` behind ``get_config`` until ``reset_config``.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import (
    DEFAULT_API_URL,
    DEFAULT_BASE_LOCALE,
    EnvironmentVariable,
    LogLevel,
    QueueName,
)


def _env(variable: EnvironmentVariable, default: str = "") -> str:
    return os.getenv(variable.value, default)


class ApiConfig(BaseModel):
    """Remote catalog API used by the HTTP transport."""

    base_url: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.CATALOG_API_URL, DEFAULT_API_URL),
        description="Base URL of the catalog API, injected at deploy time",
        validate_default=True,
    )
    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("base_url")
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths such as ``/tenants/{t}/catalogos`` are appended directly."""
        return v.rstrip("/")


class DatabaseConfig(BaseModel):
    """Catalog database; ``db.db_config`` turns this into an engine."""

    connection_string: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.DATABASE_URL, "sqlite:///./catalog_core.db"),
        description="SQLAlchemy URL of the catalog database",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")


class QueueConfig(BaseModel):
    """Azure Storage Queue that receives structured catalog logs."""

    connection_string: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.AZURE_STORAGE_CONNECTION),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default=QueueName.LOGS.value, description="Logs queue name")


class LoggingConfig(BaseModel):
    level: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.LOG_LEVEL, LogLevel.INFO.value),
        description="Logging level",
        validate_default=True,
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class LocaleConfig(BaseModel):
    """Locale defaults for tenants that have no locale settings of their own."""

    base_locale: str = Field(
        default_factory=lambda: _env(EnvironmentVariable.BASE_LOCALE, DEFAULT_BASE_LOCALE),
        description="Locale edited through the canonical item fields",
        validate_default=True,
    )

    @field_validator("base_locale")
    def normalize_locale(cls, v: str) -> str:
        return v.strip().lower() or DEFAULT_BASE_LOCALE


class FeatureFlags(BaseModel):
    enable_logs_queue: bool = Field(
        default=False, description="Ship structured logs to the Azure logs queue"
    )
    enable_operation_logging: bool = Field(
        default=True, description="Log ENTER/EXIT lines for catalog service operations"
    )


class AppConfig(BaseModel):
    """Settings for the catalog services, transports and logging."""

    api: ApiConfig = Field(default_factory=ApiConfig, description="Catalog API configuration")
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    queue: QueueConfig = Field(default_factory=QueueConfig, description="Queue configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    locales: LocaleConfig = Field(default_factory=LocaleConfig, description="Locale defaults")
    features: FeatureFlags = Field(default_factory=FeatureFlags, description="Feature flags")

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls()


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """The process configuration, built from the environment on first use."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    global _config
    _config = config


def reset_config() -> None:
    """Forget the current configuration so the next read sees the environment again."""
    global _config
    _config = None
