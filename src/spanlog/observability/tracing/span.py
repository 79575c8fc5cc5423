"""Span: one unit of traced work rendered through a log entry.

A span carries identity (operation name, start time), baggage that is copied
into future children, span-local tags, and the log handle opened for it when
it started. A span is its own context.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .fields import Field, FinishOptions, fields_from_kv

if TYPE_CHECKING:
    from types import TracebackType

    from spanlog.observability.logging import LogHandle

    from .tracer import Tracer


class Span:
    """Represents a unit of work in a trace.

    Spans are created by Tracer.start_span and are active immediately.
    finish() must be the last call made on a span, except for `context`
    and `tracer`, which remain valid. Finishing twice is undefined.

    Spans are not thread-safe: callers sharing a span across threads must
    serialize access themselves.

    Example:
        >>> span = tracer.start_span("charge", tags={"order_id": 42})
        >>> span.set_baggage_item("customer", "c-17")
        >>> span.log_kv("event", "soft error", "waited.millis", 1500)
        >>> span.finish()
    """

    __slots__ = ("_tracer", "_operation_name", "_started_at", "_entry", "_baggage", "_tags")

    def __init__(self, tracer: Tracer, operation_name: str, started_at: float) -> None:
        self._tracer = tracer
        self._operation_name = operation_name
        self._started_at = started_at
        self._entry: LogHandle | None = None  # set by Tracer.start_span
        self._baggage: dict[str, str] | None = None
        self._tags: dict[str, Any] | None = None

    def __repr__(self) -> str:
        return f"Span(operation_name={self._operation_name!r}, started_at={self._started_at})"

    # ─────────────────────────────────────────────────────────────────────
    # Identity
    # ─────────────────────────────────────────────────────────────────────

    @property
    def context(self) -> Span:
        """The span's context, which is the span itself."""
        return self

    @property
    def tracer(self) -> Tracer:
        return self._tracer

    @property
    def operation_name(self) -> str:
        return self._operation_name

    @property
    def started_at(self) -> float:
        return self._started_at

    @property
    def baggage(self) -> dict[str, str]:
        """Copy of the baggage items."""
        return dict(self._baggage or {})

    @property
    def tags(self) -> dict[str, Any]:
        """Copy of the tags."""
        return dict(self._tags or {})

    def set_operation_name(self, operation_name: str) -> Span:
        """Set or change the operation name, returns self for chaining."""
        self._operation_name = operation_name
        return self

    # ─────────────────────────────────────────────────────────────────────
    # Tags & Baggage
    # ─────────────────────────────────────────────────────────────────────

    def set_tag(self, key: str, value: Any) -> Span:
        """Set a span-local tag, overwriting any previous value. Any value is accepted."""
        if self._tags is None:
            self._tags = {}
        self._tags[key] = value
        return self

    def set_baggage_item(self, key: str, value: str) -> Span:
        """Set a baggage item that propagates to spans started as children after this call.

        Children copy baggage when they start, so later changes here never
        reach existing descendants.
        """
        if self._baggage is None:
            self._baggage = {}
        self._baggage[key] = value if isinstance(value, str) else str(value)
        return self

    def get_baggage_item(self, key: str) -> str:
        """Baggage value for `key`, or "" if absent."""
        if self._baggage is None:
            return ""
        return self._baggage.get(key, "")

    def foreach_baggage_item(self, handler: Callable[[str, str], bool]) -> None:
        """Call handler(key, value) for each baggage item in no particular order.

        Iteration continues while the handler returns True and stops at the
        first False.
        """
        for k, v in list((self._baggage or {}).items()):
            if not handler(k, v):
                return

    # ─────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────

    def log_fields(self, *fields: Field) -> None:
        """Emit one info record merging baggage, tags and `fields`.

        The field named by the tracer's message key becomes the record's message.
        """
        self._tracer._emit(self._entry, self._baggage, self._tags, fields)

    def log_kv(self, *alternating: object) -> None:
        """Concise form of log_fields taking flattened key/value pairs.

        Example:
            >>> span.log_kv("event", "soft error", "type", "cache timeout", "waited.millis", 1500)
        """
        self.log_fields(*fields_from_kv(*alternating))

    def finish(self) -> None:
        """Close the span's log entry."""
        self._close(None)

    def finish_with_options(self, options: FinishOptions) -> None:
        """Emit one record per log record in `options`, then finish."""
        for record in options.log_records:
            self._tracer._emit(self._entry, self._baggage, self._tags, record.fields)
        self._close(None)

    def _close(self, error: BaseException | None) -> None:
        if self._entry is not None:
            self._entry.close(error)

    # Deprecated: use log_fields or log_kv
    def log_event(self, event: str, payload: object = None) -> None:
        pass

    # Deprecated: use log_fields or log_kv
    def log_event_with_payload(self, event: str, payload: object) -> None:
        pass

    # Deprecated: use log_fields or log_kv
    def log(self, **kwargs: object) -> None:
        pass

    # ─────────────────────────────────────────────────────────────────────
    # Context Manager
    # ─────────────────────────────────────────────────────────────────────

    def __enter__(self) -> Span:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None) -> None:
        self._close(exc_val)
