"""Shared fixtures: a recording sink and a logger rendering into memory."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from spanlog.foundation.config import clear_settings_cache
from spanlog.observability.logging import BoundLogger, MemoryRenderer, set_default_sink
from spanlog.observability.tracing import Tracer


@dataclass
class RecordingHandle:
    """LogHandle that records every call made on it."""

    event: str
    fields: dict[str, Any]
    parent: RecordingHandle | None = None
    emitted: list[tuple[str, dict[str, Any] | None]] = field(default_factory=list)
    children: list[RecordingHandle] = field(default_factory=list)
    closed_with: list[BaseException | None] = field(default_factory=list)

    def open_nested(self, event: str, fields: Mapping[str, Any] | None = None) -> RecordingHandle:
        child = RecordingHandle(event, dict(fields or {}), parent=self)
        self.children.append(child)
        return child

    def info(self, message: str, fields: Mapping[str, Any] | None = None) -> None:
        self.emitted.append((message, None if fields is None else dict(fields)))

    def close(self, error: BaseException | None = None) -> None:
        self.closed_with.append(error)


@dataclass
class RecordingSink:
    """LogSink keeping the top-level handles it opened."""

    roots: list[RecordingHandle] = field(default_factory=list)

    def open_entry(self, event: str, fields: Mapping[str, Any] | None = None) -> RecordingHandle:
        handle = RecordingHandle(event, dict(fields or {}))
        self.roots.append(handle)
        return handle


@pytest.fixture(autouse=True)
def clean_globals() -> object:
    """Reset settings cache, default sink and global tracer around each test."""
    clear_settings_cache()
    set_default_sink(None)
    Tracer.reset_global()
    yield
    clear_settings_cache()
    set_default_sink(None)
    Tracer.reset_global()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def tracer(sink: RecordingSink) -> Tracer:
    return Tracer(sink)


@pytest.fixture
def memory() -> MemoryRenderer:
    return MemoryRenderer()


@pytest.fixture
def logger(memory: MemoryRenderer) -> BoundLogger:
    return BoundLogger(_renderer=memory)
