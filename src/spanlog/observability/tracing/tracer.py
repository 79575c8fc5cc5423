"""Tracer for creating spans rendered through a structured log sink.

Provides the main API for instrumenting code with traces. Every span opens
a log entry named after its operation; child spans open entries nested
under their parent's.

Usage:
    >>> tracer = Tracer(get_logger("checkout"))
    >>> parent = tracer.start_span("parent", tags={"tk": "tv"})
    >>> parent.set_baggage_item("bk", "bv")
    >>> child = tracer.start_span("child", child_of=parent)
    >>> child.get_baggage_item("bk")
    'bv'
    >>> child.finish()
    >>> parent.finish()
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Mapping
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, NoReturn, ParamSpec, TypeVar

from spanlog.foundation.config import TracerConfig, tracer_config
from spanlog.foundation.errors import UnsupportedFormatError
from spanlog.observability.logging import LogHandle, LogSink, get_default_sink

from .fields import Field, Reference, ReferenceType
from .span import Span

if TYPE_CHECKING:
    from types import TracebackType

P = ParamSpec("P")
T = TypeVar("T")

# Span made active by the innermost SpanScope (per thread / asyncio task)
_active_span: ContextVar[Span | None] = ContextVar("active_span", default=None)

_global_lock = threading.Lock()
_global_tracer: Tracer | None = None


class Tracer:
    """Creates spans and owns the field-merge policy.

    Immutable after construction. The sink is referenced, not owned, so it
    may be shared with other tracers or used directly.

    Args:
        sink: Where span entries are opened. Defaults to the process-wide
            default sink.
        config: Construction options; defaults to SPANLOG_TRACER_* settings.
        message_key: Overrides config.message_key.
    """

    __slots__ = ("_sink", "_message_key")

    def __init__(self, sink: LogSink | None = None, config: TracerConfig | None = None, *, message_key: str | None = None) -> None:
        config = config or tracer_config()
        self._sink: LogSink = sink if sink is not None else get_default_sink()
        self._message_key: str = message_key if message_key is not None else config.message_key

    def __repr__(self) -> str:
        return f"Tracer(message_key={self._message_key!r})"

    @property
    def sink(self) -> LogSink:
        return self._sink

    @property
    def message_key(self) -> str:
        return self._message_key

    # ─────────────────────────────────────────────────────────────────────
    # Span Creation
    # ─────────────────────────────────────────────────────────────────────

    def start_span(
        self,
        operation_name: str,
        child_of: object = None,
        references: Iterable[Reference] | None = None,
        tags: Mapping[str, Any] | None = None,
        start_time: float | None = None,
    ) -> Span:
        """Create, start and return a new span.

        A span without a child-of reference to a Span becomes the root of its
        own trace. When several child-of references are given the last one
        wins; other reference types and foreign contexts are ignored.

        Example:
            >>> sp = tracer.start_span(
            ...     "GetFeed",
            ...     child_of=parent_span,
            ...     tags={"user_agent": req.user_agent},
            ...     start_time=req.timestamp,
            ... )
        """
        refs = list(references or ())
        if child_of is not None:
            refs.append(Reference(ReferenceType.CHILD_OF, child_of))

        parent: Span | None = None
        for ref in refs:
            if ref.type == ReferenceType.CHILD_OF and isinstance(ref.referenced_context, Span):
                parent = ref.referenced_context

        span = Span(self, operation_name, start_time if start_time is not None else time.time())
        if parent is not None:
            for k, v in (parent._baggage or {}).items():
                span.set_baggage_item(k, v)

        _, f = self._make_fields(span._baggage, dict(tags or {}))
        if parent is None or parent._entry is None:
            span._entry = self._sink.open_entry(operation_name, f)
        else:
            span._entry = parent._entry.open_nested(operation_name, f)
        return span

    def span(self, operation_name: str, **start_kwargs: Any) -> SpanScope:
        """Create a span context manager that also makes the span active.

        Scopes opened inside it default to being its children unless child_of
        or a child-of reference names another parent.

        Example:
            >>> with tracer.span("fetch") as span:
            ...     span.set_tag("url", "https://api.example.com")
            ...     with tracer.span("parse"):  # child of "fetch"
            ...         ...
        """
        return SpanScope(self, operation_name, start_kwargs)

    # ─────────────────────────────────────────────────────────────────────
    # Field Merging
    # ─────────────────────────────────────────────────────────────────────

    def _make_fields(
        self,
        baggage: Mapping[str, str] | None,
        tags: Mapping[str, Any] | None,
        fields: Iterable[Field] = (),
    ) -> tuple[str, dict[str, Any]]:
        """Merge baggage, then tags, then explicit fields; later sources win.

        The explicit field named by message_key is returned as the message
        rather than stored.
        """
        f: dict[str, Any] = {**(baggage or {}), **(tags or {})}
        msg = ""
        for fld in fields:
            if fld.key == self._message_key:
                msg = fld.value if isinstance(fld.value, str) else ""
            else:
                f[fld.key] = fld.value
        return msg, f

    def _emit(
        self,
        entry: LogHandle | None,
        baggage: Mapping[str, str] | None,
        tags: Mapping[str, Any] | None,
        fields: Iterable[Field] = (),
    ) -> None:
        if entry is None:
            return
        msg, f = self._make_fields(baggage, tags, fields)
        if f:
            entry.info(msg, f)
        else:
            entry.info(msg)

    # ─────────────────────────────────────────────────────────────────────
    # Propagation
    # ─────────────────────────────────────────────────────────────────────

    def inject(self, span_context: object, format: object, carrier: object) -> NoReturn:  # noqa: A002
        """Trace context never leaves the process: always raises UnsupportedFormatError."""
        raise UnsupportedFormatError.for_format(format)

    def extract(self, format: object, carrier: object) -> NoReturn:  # noqa: A002
        """Always raises UnsupportedFormatError, mirroring inject()."""
        raise UnsupportedFormatError.for_format(format)

    # ─────────────────────────────────────────────────────────────────────
    # Global Instance
    # ─────────────────────────────────────────────────────────────────────

    def configure_global(self) -> None:
        """Set this tracer as the global instance."""
        global _global_tracer
        with _global_lock:
            _global_tracer = self

    @classmethod
    def get_global(cls) -> Tracer | None:
        """Get the global tracer instance."""
        return _global_tracer

    @classmethod
    def reset_global(cls) -> None:
        """Clear the global tracer (useful for testing)."""
        global _global_tracer
        with _global_lock:
            _global_tracer = None


@dataclass(slots=True)
class SpanScope:
    """Context manager for span lifecycle. Activates the span and finishes it on exit.

    An exception escaping the scope is passed to the log entry's close and
    re-raised.
    """

    tracer: Tracer
    operation_name: str
    start_kwargs: dict[str, Any] = field(default_factory=dict)
    _span: Span | None = None
    _token: Token[Span | None] | None = None

    def __enter__(self) -> Span:
        kwargs = dict(self.start_kwargs)
        refs = kwargs["references"] = list(kwargs.get("references") or ())
        if kwargs.get("child_of") is None and not any(r.type == ReferenceType.CHILD_OF for r in refs):
            kwargs["child_of"] = _active_span.get()
        self._span = self.tracer.start_span(self.operation_name, **kwargs)
        self._token = _active_span.set(self._span)
        return self._span

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _active_span.reset(self._token)
            self._token = None
        if self._span is not None:
            self._span._close(exc_val)

    async def __aenter__(self) -> Span:
        return self.__enter__()

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


# ─────────────────────────────────────────────────────────────────────────────
# Convenience Functions
# ─────────────────────────────────────────────────────────────────────────────


def active_span() -> Span | None:
    """The span activated by the innermost enclosing Tracer.span() scope."""
    return _active_span.get()


def get_tracer() -> Tracer:
    """Get the global tracer, or a fresh tracer on the default sink if none is configured."""
    return Tracer.get_global() or Tracer()


def traced(operation_name: str | None = None, tracer: Tracer | None = None) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to run a function inside a span.

    The span is a child of the active span, if any. Exceptions close the
    span's entry with the error and propagate.

    Example:
        >>> @traced("fetch_data")
        ... def fetch_data(url: str) -> dict:
        ...     return requests.get(url).json()
    """
    import inspect

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        name = operation_name or func.__name__

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with (tracer or get_tracer()).span(name):
                return func(*args, **kwargs)

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            async with (tracer or get_tracer()).span(name):
                return await func(*args, **kwargs)  # type: ignore[misc]

        return async_wrapper if inspect.iscoroutinefunction(func) else wrapper  # type: ignore[return-value]

    return decorator
