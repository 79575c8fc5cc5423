"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from spanlog.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.tracer.message_key
    'message'
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # SPANLOG_TRACER_MESSAGE_KEY=msg
    # SPANLOG_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MESSAGE_KEY = "message"


class TracerConfig(BaseSettings):
    """Tracer construction options.

    message_key names the one explicit log field that is pulled out as the
    record's human-readable message instead of being stored as a field.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPANLOG_TRACER_",
        extra="ignore",
        frozen=True,
    )

    message_key: Annotated[str, Field(min_length=1, description="Field carrying a log record's message")] = DEFAULT_MESSAGE_KEY


class LoggingSettings(BaseSettings):
    """Default sink configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPANLOG_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = Field(default=None, description="Force console colors (None = auto-detect)")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class SpanlogSettings(BaseSettings):
    """Root settings for spanlog.

    Example environment variables:
        SPANLOG_TRACER_MESSAGE_KEY=msg
        SPANLOG_LOG_LEVEL=DEBUG
        SPANLOG_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="SPANLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    tracer: TracerConfig = Field(default_factory=TracerConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> SpanlogSettings:
    """Get the global settings instance (cached)."""
    return SpanlogSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()


def tracer_config() -> TracerConfig:
    """Tracer section of the settings.

    Unrelated invalid variables (e.g. SPANLOG_LOG_LEVEL=TRACE) fail the root
    settings; the section is then read on its own, and defaults are used if
    it is invalid too.
    """
    try:
        return get_settings().tracer
    except ValidationError:
        pass
    try:
        return TracerConfig()
    except ValidationError:
        return TracerConfig.model_construct()


def logging_settings() -> LoggingSettings:
    """Logging section of the settings, with the same fallback as tracer_config()."""
    try:
        return get_settings().logging
    except ValidationError:
        pass
    try:
        return LoggingSettings()
    except ValidationError:
        return LoggingSettings.model_construct()
