"""Structured logging module: the sink spans are rendered through."""

from .logger import (
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

__all__ = [
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
]
