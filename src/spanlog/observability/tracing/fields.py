"""Typed log fields, span references and finish options.

Fields are the unit of span logging: `Span.log_fields` takes them directly
and `Span.log_kv` builds them from loose key/value pairs via `Field.of`.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class FieldKind(StrEnum):
    """Value kinds a log field can carry."""

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    ERROR = "error"
    OBJECT = "object"  # Anything else; rendering is up to the sink


@dataclass(frozen=True, slots=True)
class Field:
    """A key/value pair tagged with its value kind.

    Example:
        >>> span.log_fields(
        ...     Field.string("event", "soft error"),
        ...     Field.int("waited.millis", 1500),
        ... )
    """

    key: str
    kind: FieldKind
    value: Any

    @classmethod
    def string(cls, key: str, value: str) -> Field: return cls(key, FieldKind.STRING, value)
    @classmethod
    def bool(cls, key: str, value: bool) -> Field: return cls(key, FieldKind.BOOL, value)
    @classmethod
    def int(cls, key: str, value: int) -> Field: return cls(key, FieldKind.INT, value)
    @classmethod
    def float(cls, key: str, value: float) -> Field: return cls(key, FieldKind.FLOAT, value)
    @classmethod
    def object(cls, key: str, value: object) -> Field: return cls(key, FieldKind.OBJECT, value)

    @classmethod
    def error(cls, exc: BaseException) -> Field:
        """Error fields always use the key "error"."""
        return cls("error", FieldKind.ERROR, exc)

    @classmethod
    def of(cls, key: str, value: object) -> Field:
        """Dispatch a runtime value to the matching field kind."""
        match value:
            case str(): return cls.string(key, value)
            case bool(): return cls.bool(key, value)  # bool before int: bool is an int subclass
            case int(): return cls.int(key, value)
            case float(): return cls.float(key, value)
            case BaseException(): return cls.error(value)
            case _: return cls.object(key, value)


def fields_from_kv(*alternating: object) -> list[Field]:
    """Build fields from flattened key/value pairs.

    A single mapping argument is accepted as well. Non-string keys are
    skipped and a trailing unpaired item is ignored.
    """
    if len(alternating) == 1 and isinstance(alternating[0], Mapping):
        pairs: Iterable[tuple[object, object]] = alternating[0].items()
    else:
        pairs = zip(alternating[::2], alternating[1::2])
    return [Field.of(k, v) for k, v in pairs if isinstance(k, str)]


# ─────────────────────────────────────────────────────────────────────────────
# Start / Finish Options
# ─────────────────────────────────────────────────────────────────────────────


class ReferenceType(StrEnum):
    """Causal relationship between a new span and an existing context."""

    CHILD_OF = "child_of"
    FOLLOWS_FROM = "follows_from"


@dataclass(frozen=True, slots=True)
class Reference:
    """Start-time reference to another span context."""

    type: ReferenceType
    referenced_context: object


def child_of(context: object) -> Reference:
    return Reference(ReferenceType.CHILD_OF, context)


def follows_from(context: object) -> Reference:
    return Reference(ReferenceType.FOLLOWS_FROM, context)


@dataclass(slots=True)
class LogRecord:
    """A batch of fields logged together, e.g. at finish time."""

    fields: Sequence[Field] = ()
    timestamp: float = field(default_factory=time.time)


@dataclass(slots=True)
class FinishOptions:
    """Options for Span.finish_with_options.

    finish_time is accepted for API symmetry; the sink measures duration itself.
    """

    log_records: Sequence[LogRecord] = ()
    finish_time: float | None = None


class Format(StrEnum):
    """Cross-process carrier formats. None of them is supported."""

    BINARY = "binary"
    TEXT_MAP = "text_map"
    HTTP_HEADERS = "http_headers"
