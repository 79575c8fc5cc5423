"""Structured logging sink for span lifecycle and log events.

Provides the logging capability spans are rendered through:
- Entries opened per span, nested under the parent span's entry
- Bound context (fields) inherited by nested entries
- Human-readable dev output, JSON lines for production

Quick Start:
    >>> from spanlog.observability.logging import configure_logging, get_logger
    >>>
    >>> # Configure (once at startup)
    >>> configure_logging(format="console")  # or "json" for production
    >>>
    >>> log = get_logger("checkout")
    >>> entry = log.open_entry("charge card", {"order_id": 42})
    >>> entry.info("retrying", {"attempt": 2})
    >>> entry.close()

Any object implementing LogSink can be handed to a Tracer instead.
"""

from __future__ import annotations

import logging
import sys
import threading
import time
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

JsonDict = dict[str, Any]
JsonMapping = Mapping[str, Any]

# Context var for scoped fields (persists across async calls)
_log_context: ContextVar[JsonDict] = ContextVar("log_context", default={})


# ─────────────────────────────────────────────────────────────────────────────
# Sink Capability
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogHandle(Protocol):
    """An open log scope. Owned by exactly one span and closed once."""

    def open_nested(self, event: str, fields: JsonMapping | None = None) -> LogHandle: ...
    def info(self, message: str, fields: JsonMapping | None = None) -> None: ...
    def close(self, error: BaseException | None = None) -> None: ...


@runtime_checkable
class LogSink(Protocol):
    """Anything that can open a top-level log entry."""

    def open_entry(self, event: str, fields: JsonMapping | None = None) -> LogHandle: ...


# ─────────────────────────────────────────────────────────────────────────────
# Core Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class BoundLogger:
    """Structured logger with bound context. Immutable - bind() returns a new logger with merged context.

    Example:
        >>> log = BoundLogger(context={"service": "api"})
        >>> log.info("request received", path="/users")
        # => 10:30:45.120 [info] request received path="/users" service="api"
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = logging.DEBUG

    def bind(self, /, **kw: Any) -> BoundLogger:
        """Create new logger with additional bound context."""
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def unbind(self, *keys: str) -> BoundLogger:
        """Create new logger without specified keys."""
        return BoundLogger(context={k: v for k, v in self.context.items() if k not in keys},
                           _renderer=self._renderer, _level=self._level)

    def _log(self, level: int, event: str, /, **kw: Any) -> None:
        if level < self._level:
            return
        # Merge contexts: scoped -> bound -> call-site
        merged = {**_log_context.get(), **self.context, **kw}
        (self._renderer or _get_renderer()).render(LogEntry(time.time(), _level_name(level), event, merged))

    def debug(self, event: str, /, **kw: Any) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, /, **kw: Any) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, /, **kw: Any) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, /, **kw: Any) -> None: self._log(logging.ERROR, event, **kw)

    def open_entry(self, event: str, fields: JsonMapping | None = None) -> TraceEntry:
        """Open a timed entry carrying `fields`. Logs `event` now and again on close."""
        entry = TraceEntry(self.bind(**fields) if fields else self, event)
        entry.logger.info(event)
        return entry


@dataclass(slots=True)
class TraceEntry:
    """Open log scope returned by BoundLogger.open_entry.

    Records emitted through the entry carry the logger's bound fields; nested
    entries inherit them. close() reports the elapsed time.
    """

    logger: BoundLogger
    event: str
    started: float = field(default_factory=time.perf_counter)

    def open_nested(self, event: str, fields: JsonMapping | None = None) -> TraceEntry:
        return self.logger.open_entry(event, fields)

    def info(self, message: str, fields: JsonMapping | None = None) -> None:
        self.logger.info(message, **(fields or {}))

    def close(self, error: BaseException | None = None) -> None:
        dur = round((time.perf_counter() - self.started) * 1000, 2)
        if error is not None:
            self.logger.error(self.event, duration_ms=dur, error=str(error))
        else:
            self.logger.info(self.event, duration_ms=dur)


@dataclass(slots=True)
class LogEntry:
    """Immutable log entry with all context."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def ts_iso(self) -> str:
        """ISO formatted timestamp."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """Human-readable timestamp (HH:MM:SS.mmm)."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    """Protocol for log output renderers."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """Human-readable colored console output. Format: timestamp [level] event key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = auto-detect
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = getattr(self.output, "isatty", lambda: False)()

    def render(self, entry: LogEntry) -> None:
        c = _COLORS if self.colors else _NO_COLORS
        parts = ([f"{c['dim']}{entry.ts_human}{c['reset']}"] if self.show_timestamp else [])
        level_color = _LEVEL_COLORS.get(entry.level, c['dim']) if self.colors else ''
        parts += [f"{level_color}[{entry.level}]{c['reset']}"]
        if entry.event:
            parts.append(f"{c['bold']}{entry.event}{c['reset']}")
        parts += [f"{c['cyan']}{k}{c['reset']}={_format_value(v, c)}" for k, v in sorted(entry.context.items())]
        print(" ".join(parts), file=self.output)


_JSON_RECORD_KEYS = frozenset({"timestamp", "level", "event"})


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation (Elasticsearch, Loki, Datadog, etc.)."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        import orjson
        record: JsonDict = {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event}
        # fields named like record keys are kept under a "fields." prefix
        record.update((f"fields.{k}" if k in _JSON_RECORD_KEYS else k, v) for k, v in entry.context.items())
        print(orjson.dumps(record, default=str, option=orjson.OPT_NON_STR_KEYS).decode(), file=self.output)


@dataclass(slots=True)
class MemoryRenderer:
    """Keeps rendered entries in a list. Useful for tests and in-process inspection."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self) -> list[str]:
        return [e.event for e in self.entries]

    def clear(self) -> None:
        self.entries.clear()


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer."""

    def render(self, entry: LogEntry) -> None:
        pass


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


_lock = threading.Lock()
_renderer: LogRenderer | None = None
_default_level: int = logging.INFO
_default_sink: LogSink | None = None
_default_sink_built = False  # True when _default_sink came from get_default_sink()


def configure_logging(
    format: str = "console",  # noqa: A002 - shadows builtin but matches stdlib
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Configure global structured logging. Format: "console" (human), "json" (machine), "none"."""
    global _renderer, _default_level, _default_sink, _default_sink_built
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    with _lock:
        _default_level = getattr(logging, level.upper(), logging.INFO)
        _renderer = renderer
        if _default_sink_built:
            _default_sink, _default_sink_built = None, False  # rebuilt with the new level on next use
    return renderer


def get_logger(name: str | None = None, **initial_context: Any) -> BoundLogger:
    """Get a structured logger with optional initial context. Name is added to context as 'logger'."""
    ctx = {**initial_context, **({"logger": name} if name else {})}
    return BoundLogger(context=ctx, _level=_default_level)


def get_default_sink() -> LogSink:
    """Process-wide fallback sink for tracers constructed without one.

    Initialized on first use from the SPANLOG_LOG_* settings unless
    configure_logging() or set_default_sink() ran first.
    """
    global _default_sink, _default_sink_built
    with _lock:
        if _default_sink is None:
            if _renderer is None:
                _configure_from_settings()
            _default_sink, _default_sink_built = BoundLogger(_level=_default_level), True
        return _default_sink


def set_default_sink(sink: LogSink | None) -> None:
    """Override the process-wide fallback sink. None resets to lazy initialization.

    An installed sink survives configure_logging().
    """
    global _default_sink, _default_sink_built
    with _lock:
        _default_sink, _default_sink_built = sink, False


def _configure_from_settings() -> None:
    """Install renderer and level from settings. Caller holds _lock."""
    global _renderer, _default_level
    from spanlog.foundation.config import logging_settings
    cfg = logging_settings()
    match cfg.format:
        case "json": _renderer = JsonRenderer()
        case "none": _renderer = NoOpRenderer()
        case _: _renderer = ConsoleRenderer(colors=cfg.colors)
    _default_level = getattr(logging, cfg.level, logging.INFO)


def _get_renderer() -> LogRenderer:
    """Get configured renderer or create default."""
    global _renderer
    if (renderer := _renderer) is None:
        _renderer = renderer = ConsoleRenderer()
    return renderer


# ─────────────────────────────────────────────────────────────────────────────
# Scoped Context
# ─────────────────────────────────────────────────────────────────────────────


class log_context:
    """Context manager for scoped logging context. Adds key-value pairs to all log entries within the scope."""

    __slots__ = ("_ctx", "_token")

    def __init__(self, **kw: Any) -> None:
        self._ctx: JsonDict = dict(kw)
        self._token: object | None = None

    def __enter__(self) -> log_context:
        self._token = _log_context.set({**_log_context.get(), **self._ctx})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        self._token and _log_context.reset(self._token)  # type: ignore[func-returns-value,arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


_COLORS = {"reset": "\033[0m", "bold": "\033[1m", "dim": "\033[2m", "red": "\033[31m",
           "green": "\033[32m", "yellow": "\033[33m", "blue": "\033[34m", "cyan": "\033[36m", "white": "\033[37m"}
_NO_COLORS = {k: "" for k in _COLORS}
_LEVEL_COLORS = {"debug": _COLORS["dim"], "info": _COLORS["green"], "warning": _COLORS["yellow"], "error": _COLORS["red"]}


def _level_name(level: int) -> str:
    """Convert logging level int to lowercase name."""
    return logging.getLevelName(level).lower()


def _format_value(v: object, c: dict[str, str]) -> str:
    """Format a value for console output."""
    match v:
        case str(): return f'{c["yellow"]}"{v}"{c["reset"]}'
        case bool(): return f'{c["blue"]}{str(v).lower()}{c["reset"]}'
        case int() | float(): return f'{c["blue"]}{v}{c["reset"]}'
        case BaseException(): return f'{c["red"]}"{v}"{c["reset"]}'
        case dict(): return f'{c["dim"]}{{{len(v)} items}}{c["reset"]}'
        case list() | tuple(): return f'{c["dim"]}[{len(v)} items]{c["reset"]}'
        case _: return f'{c["white"]}{v!r}{c["reset"]}'
