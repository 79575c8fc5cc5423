"""Tracing module: tracer, spans, log fields and start/finish options."""

from .fields import (
    Field,
    FieldKind,
    FinishOptions,
    Format,
    LogRecord,
    Reference,
    ReferenceType,
    child_of,
    fields_from_kv,
    follows_from,
)
from .span import Span
from .tracer import SpanScope, Tracer, active_span, get_tracer, traced

__all__ = [
    # Fields
    "Field",
    "FieldKind",
    "fields_from_kv",
    # Options
    "FinishOptions",
    "LogRecord",
    "Reference",
    "ReferenceType",
    "child_of",
    "follows_from",
    "Format",
    # Span
    "Span",
    # Tracer
    "SpanScope",
    "Tracer",
    "active_span",
    "get_tracer",
    "traced",
]
