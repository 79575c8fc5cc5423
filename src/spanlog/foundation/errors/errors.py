"""Structured errors for the tracing layer.

Provides error codes and a pydantic error model for propagation failures.
Every other tracing operation is defined to never fail.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorCode(StrEnum):
    """Error codes for trace propagation failures.

    Only UNSUPPORTED_FORMAT is raised today; the rest name the outcomes a
    carrier-aware propagator would report.
    """
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    INVALID_CARRIER = "INVALID_CARRIER"
    SPAN_CONTEXT_NOT_FOUND = "SPAN_CONTEXT_NOT_FOUND"
    SPAN_CONTEXT_CORRUPTED = "SPAN_CONTEXT_CORRUPTED"


class TracingError(BaseModel):
    """Structured description of a tracing failure.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        format: Propagation format involved, if any
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
        json_schema_extra={
            "title": "Tracing Error",
            "examples": [{"message": "format not supported: http_headers", "code": "UNSUPPORTED_FORMAT", "format": "http_headers"}],
        },
    )

    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode = ErrorCode.UNSUPPORTED_FORMAT
    format: str | None = None

    @field_validator("format", mode="before")
    @classmethod
    def _coerce_format(cls, v: object) -> str | None:
        """Formats may be enum members or arbitrary user objects."""
        return None if v is None else str(v)


class TracingException(Exception):
    """Exception wrapping a TracingError for raising."""

    __slots__ = ("error",)

    def __init__(self, error: TracingError) -> None:
        self.error = error
        super().__init__(error.message)

    @property
    def code(self) -> ErrorCode:
        return self.error.code


class UnsupportedFormatError(TracingException):
    """Raised by inject/extract: trace context never leaves the process."""

    @classmethod
    def for_format(cls, format: object) -> Self:  # noqa: A002
        return cls(TracingError(message=f"format not supported: {format}", code=ErrorCode.UNSUPPORTED_FORMAT, format=format))
