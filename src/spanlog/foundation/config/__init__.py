"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .settings import (
    DEFAULT_MESSAGE_KEY,
    LoggingSettings,
    SpanlogSettings,
    TracerConfig,
    clear_settings_cache,
    get_settings,
    logging_settings,
    tracer_config,
)

__all__ = [
    "DEFAULT_MESSAGE_KEY",
    "LoggingSettings",
    "SpanlogSettings",
    "TracerConfig",
    "clear_settings_cache",
    "get_settings",
    "logging_settings",
    "tracer_config",
]
