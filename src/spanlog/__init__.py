"""spanlog - Minimal tracing provider backed by a structured log stream.

Spans are units of work arranged into parent/child trees. Each span opens a
log entry named after its operation, nested under its parent's entry; tags,
baggage and log fields are merged into the records the entry emits. There is
no exporter: the log stream is the backend.

Quick Start:
    >>> from spanlog import Tracer, get_logger
    >>>
    >>> tracer = Tracer(get_logger("checkout"))
    >>> parent = tracer.start_span("parent", tags={"tk": "tv"})
    >>> parent.set_baggage_item("bk", "bv")
    >>> child = tracer.start_span("child", child_of=parent)
    >>> child.log_kv("event", "soft error", "waited.millis", 1500)
    >>> child.finish()
    >>> parent.finish()

Scoped spans:
    >>> with tracer.span("fetch") as span:
    ...     with tracer.span("parse"):  # child of "fetch"
    ...         ...

Configuration (environment):
    SPANLOG_TRACER_MESSAGE_KEY  field used as a record's message (default "message")
    SPANLOG_LOG_LEVEL           default sink level (default INFO)
    SPANLOG_LOG_FORMAT          default sink format: console, json, none
"""

from spanlog.foundation.config import DEFAULT_MESSAGE_KEY, TracerConfig, get_settings
from spanlog.foundation.errors import ErrorCode, TracingError, TracingException, UnsupportedFormatError
from spanlog.observability import (
    BoundLogger,
    ConsoleRenderer,
    Field,
    FieldKind,
    FinishOptions,
    Format,
    JsonRenderer,
    LogHandle,
    LogRecord,
    LogSink,
    MemoryRenderer,
    NoOpRenderer,
    Reference,
    ReferenceType,
    Span,
    Tracer,
    active_span,
    child_of,
    configure_logging,
    follows_from,
    get_default_sink,
    get_logger,
    get_tracer,
    log_context,
    set_default_sink,
    traced,
)

__version__ = "0.1.0"

__all__ = [
    # Tracing
    "Tracer",
    "Span",
    "Field",
    "FieldKind",
    "FinishOptions",
    "LogRecord",
    "Reference",
    "ReferenceType",
    "Format",
    "child_of",
    "follows_from",
    "active_span",
    "get_tracer",
    "traced",
    # Logging
    "LogSink",
    "LogHandle",
    "BoundLogger",
    "ConsoleRenderer",
    "JsonRenderer",
    "MemoryRenderer",
    "NoOpRenderer",
    "configure_logging",
    "get_logger",
    "get_default_sink",
    "set_default_sink",
    "log_context",
    # Config
    "DEFAULT_MESSAGE_KEY",
    "TracerConfig",
    "get_settings",
    # Errors
    "ErrorCode",
    "TracingError",
    "TracingException",
    "UnsupportedFormatError",
]
