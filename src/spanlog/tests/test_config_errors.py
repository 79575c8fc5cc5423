"""Tests for settings and error types."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from spanlog.foundation.config import DEFAULT_MESSAGE_KEY, TracerConfig, clear_settings_cache, get_settings
from spanlog.foundation.errors import ErrorCode, TracingError, TracingException, UnsupportedFormatError
from spanlog.observability.tracing import Format


def test_settings_defaults() -> None:
    settings = get_settings()
    assert settings.tracer.message_key == DEFAULT_MESSAGE_KEY
    assert settings.logging.level == "INFO"
    assert settings.logging.format == "console"


def test_settings_cached_until_cleared(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    monkeypatch.setenv("SPANLOG_LOG_FORMAT", "json")
    assert get_settings() is first
    clear_settings_cache()
    assert get_settings().logging.format == "json"


def test_invalid_log_format_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPANLOG_LOG_FORMAT", "xml")
    with pytest.raises(ValidationError):
        get_settings()


def test_tracer_config_rejects_empty_key() -> None:
    with pytest.raises(ValidationError):
        TracerConfig(message_key="")


def test_tracer_config_is_frozen() -> None:
    config = TracerConfig()
    with pytest.raises(ValidationError):
        config.message_key = "other"  # type: ignore[misc]


def test_unsupported_format_error() -> None:
    exc = UnsupportedFormatError.for_format(Format.HTTP_HEADERS)
    assert isinstance(exc, TracingException)
    assert exc.code == ErrorCode.UNSUPPORTED_FORMAT
    assert exc.error.format == "http_headers"
    assert str(exc) == "format not supported: http_headers"


def test_tracing_error_serializes() -> None:
    err = TracingError(message="no context in carrier", code=ErrorCode.SPAN_CONTEXT_NOT_FOUND)
    assert err.model_dump() == {"message": "no context in carrier", "code": "SPAN_CONTEXT_NOT_FOUND", "format": None}
