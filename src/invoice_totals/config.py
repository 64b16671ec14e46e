"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development. Override via
    environment variables (prefixed with INVT_) or .env file.

    Examples:
        INVT_DEFAULT_CURRENCY=EUR
        INVT_DEFAULT_PRECISION=3
        INVT_LOG_LEVEL=DEBUG
        INVT_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_prefix="INVT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # Application
    app_name: str = "Invoice Totals"
    environment: Environment = Environment.DEVELOPMENT

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] | None = Field(
        default=None,
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Calculation defaults
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO 4217 code used when a document carries no currency",
    )
    default_precision: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal digits used when a currency carries no precision",
    )

    @field_validator("default_currency", mode="after")
    @classmethod
    def normalize_currency_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("log_format", mode="after")
    @classmethod
    def set_log_format_from_environment(cls, v: str | None, info) -> str:
        """Default to JSON logging in production."""
        if v is None:
            env = info.data.get("environment")
            if env == Environment.PRODUCTION:
                return "json"
        return v or "console"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
