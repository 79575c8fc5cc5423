"""Observability: spans rendered through a structured log stream.

Quick Start:
    >>> from spanlog.observability import Tracer, configure_logging, get_logger
    >>>
    >>> configure_logging(format="console")
    >>> tracer = Tracer(get_logger("my-service"))
    >>>
    >>> with tracer.span("fetch_data") as span:
    ...     span.set_tag("url", "https://api.example.com")
    ...     span.log_kv("event", "cache miss")

Cross-process propagation is not supported: Tracer.inject and Tracer.extract
raise UnsupportedFormatError for every format.
"""

from .logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogHandle,
    LogRenderer,
    LogSink,
    MemoryRenderer,
    NoOpRenderer,
    TraceEntry,
    configure_logging,
    get_default_sink,
    get_logger,
    log_context,
    set_default_sink,
)
from .tracing import (
    Field,
    FieldKind,
    FinishOptions,
    Format,
    LogRecord,
    Reference,
    ReferenceType,
    Span,
    SpanScope,
    Tracer,
    active_span,
    child_of,
    fields_from_kv,
    follows_from,
    get_tracer,
    traced,
)

__all__ = [
    # Logging
    "BoundLogger",
    "ConsoleRenderer",
    "JsonRenderer",
    "LogEntry",
    "LogHandle",
    "LogRenderer",
    "LogSink",
    "MemoryRenderer",
    "NoOpRenderer",
    "TraceEntry",
    "configure_logging",
    "get_default_sink",
    "get_logger",
    "log_context",
    "set_default_sink",
    # Tracing
    "Field",
    "FieldKind",
    "FinishOptions",
    "Format",
    "LogRecord",
    "Reference",
    "ReferenceType",
    "Span",
    "SpanScope",
    "Tracer",
    "active_span",
    "child_of",
    "fields_from_kv",
    "follows_from",
    "get_tracer",
    "traced",
]
