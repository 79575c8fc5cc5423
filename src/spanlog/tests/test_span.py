"""Tests for Span: tags, baggage, logging and lifecycle."""

from __future__ import annotations

import pytest

from spanlog.observability.tracing import Field, FinishOptions, LogRecord


# ─────────────────────────────────────────────────────────────────────────────
# Tags & Baggage
# ─────────────────────────────────────────────────────────────────────────────


def test_setters_chain(tracer) -> None:
    span = tracer.start_span("op")
    assert span.set_tag("a", 1).set_baggage_item("b", "2").set_operation_name("renamed") is span
    assert span.operation_name == "renamed"


def test_set_tag_overwrites(tracer) -> None:
    span = tracer.start_span("op")
    span.set_tag("k", "v1")
    span.set_tag("k", "v2")
    assert span.tags == {"k": "v2"}


def test_repeated_set_is_idempotent(tracer) -> None:
    once, twice = tracer.start_span("a"), tracer.start_span("b")
    once.set_tag("k", 1).set_baggage_item("b", "x")
    twice.set_tag("k", 1).set_tag("k", 1).set_baggage_item("b", "x").set_baggage_item("b", "x")

    assert once.tags == twice.tags
    assert once.baggage == twice.baggage


def test_tags_accept_any_value(tracer) -> None:
    err = ValueError("boom")
    span = tracer.start_span("op")
    span.set_tag("s", "x").set_tag("b", True).set_tag("i", -3).set_tag("f", 1.5).set_tag("e", err).set_tag("o", {"n": 1})
    assert span.tags == {"s": "x", "b": True, "i": -3, "f": 1.5, "e": err, "o": {"n": 1}}


def test_baggage_item_missing_is_empty(tracer) -> None:
    span = tracer.start_span("op")
    assert span.get_baggage_item("nope") == ""
    span.set_baggage_item("k", "v")
    assert span.get_baggage_item("nope") == ""


def test_baggage_values_are_strings(tracer) -> None:
    span = tracer.start_span("op")
    span.set_baggage_item("n", 7)  # type: ignore[arg-type]
    assert span.get_baggage_item("n") == "7"


def test_baggage_property_is_a_copy(tracer) -> None:
    span = tracer.start_span("op")
    span.set_baggage_item("k", "v")
    span.baggage["k"] = "mutated"
    assert span.get_baggage_item("k") == "v"


def test_foreach_baggage_visits_all(tracer) -> None:
    span = tracer.start_span("op")
    span.set_baggage_item("a", "1").set_baggage_item("b", "2")
    seen: dict[str, str] = {}

    def handler(k: str, v: str) -> bool:
        seen[k] = v
        return True

    span.foreach_baggage_item(handler)
    assert seen == {"a": "1", "b": "2"}


def test_foreach_baggage_stops_on_false(tracer) -> None:
    span = tracer.start_span("op")
    span.set_baggage_item("a", "1").set_baggage_item("b", "2").set_baggage_item("c", "3")
    calls: list[str] = []

    def handler(k: str, v: str) -> bool:
        calls.append(k)
        return False

    span.foreach_baggage_item(handler)
    assert len(calls) == 1


def test_foreach_baggage_without_baggage(tracer) -> None:
    calls: list[str] = []
    tracer.start_span("op").foreach_baggage_item(lambda k, v: calls.append(k) or True)
    assert calls == []


# ─────────────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────────────


def test_log_kv_type_dispatch(tracer, sink) -> None:
    span = tracer.start_span("op")
    span.log_kv("event", "soft error", "waited.millis", 1500)

    assert sink.roots[0].emitted == [("", {"event": "soft error", "waited.millis": 1500})]
    assert isinstance(sink.roots[0].emitted[0][1]["waited.millis"], int)


def test_log_kv_skips_non_string_keys_and_odd_tail(tracer, sink) -> None:
    span = tracer.start_span("op")
    span.log_kv("ok", 1, 42, "dropped", "dangling")

    assert sink.roots[0].emitted == [("", {"ok": 1})]


def test_log_kv_accepts_mapping(tracer, sink) -> None:
    tracer.start_span("op").log_kv({"event": "cache miss", "hit": False})
    assert sink.roots[0].emitted == [("", {"event": "cache miss", "hit": False})]


def test_log_kv_error_uses_error_key(tracer, sink) -> None:
    err = RuntimeError("disk full")
    tracer.start_span("op").log_kv("cause", err)
    assert sink.roots[0].emitted == [("", {"error": err})]


def test_log_fields_merges_baggage_and_tags(tracer, sink) -> None:
    span = tracer.start_span("op")
    span.set_baggage_item("a", "1")
    span.set_tag("a", "2").set_tag("b", "3")
    span.log_fields(Field.string("a", "4"))

    assert sink.roots[0].emitted == [("", {"a": "4", "b": "3"})]


def test_log_fields_message_only(tracer, sink) -> None:
    tracer.start_span("op").log_fields(Field.string("message", "hello"))
    assert sink.roots[0].emitted == [("hello", None)]


def test_log_fields_message_with_fields(tracer, sink) -> None:
    tracer.start_span("op").log_kv("message", "hello", "n", 1)
    assert sink.roots[0].emitted == [("hello", {"n": 1})]


def test_log_fields_does_not_mutate_span(tracer) -> None:
    span = tracer.start_span("op")
    span.log_kv("k", "v")
    assert span.tags == {}
    assert span.baggage == {}


def test_deprecated_logging_is_ignored(tracer, sink) -> None:
    span = tracer.start_span("op")
    span.log_event("evt")
    span.log_event_with_payload("evt", {"p": 1})
    span.log(event="evt")
    assert sink.roots[0].emitted == []


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────


def test_finish_closes_without_error(tracer, sink) -> None:
    tracer.start_span("op").finish()
    assert sink.roots[0].closed_with == [None]


def test_finish_with_options_logs_each_record(tracer, sink) -> None:
    span = tracer.start_span("op", tags={"t": "x"})
    span.finish_with_options(FinishOptions(log_records=[
        LogRecord(fields=[Field.string("event", "first")]),
        LogRecord(fields=[Field.string("message", "second"), Field.int("n", 2)]),
    ]))

    handle = sink.roots[0]
    assert handle.emitted == [("", {"t": "x", "event": "first"}), ("second", {"t": "x", "n": 2})]
    assert handle.closed_with == [None]


def test_finish_with_empty_options(tracer, sink) -> None:
    tracer.start_span("op").finish_with_options(FinishOptions())
    assert sink.roots[0].emitted == []
    assert sink.roots[0].closed_with == [None]


def test_context_and_tracer_valid_after_finish(tracer) -> None:
    span = tracer.start_span("op")
    span.finish()
    assert span.context is span
    assert span.tracer is tracer


def test_span_as_context_manager(tracer, sink) -> None:
    with tracer.start_span("op") as span:
        span.set_tag("k", "v")
    assert sink.roots[0].closed_with == [None]


def test_span_context_manager_passes_error(tracer, sink) -> None:
    with pytest.raises(KeyError):
        with tracer.start_span("op"):
            raise KeyError("missing")
    (err,) = sink.roots[0].closed_with
    assert isinstance(err, KeyError)
