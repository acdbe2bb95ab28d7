"""Unit tests for observability module."""

import io
import json
import logging
from pathlib import Path

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
import pytest

from kb_matcher.observability import (
    CHAT_REPLY_COUNT,
    MATCH_COUNT,
    MATCH_LATENCY,
    JsonFormatter,
    configure_logging,
    create_span,
    get_metrics,
    get_trace_context,
    init_metrics,
    init_tracing,
    message_trace,
    set_trace_context,
    trace_context,
)
from kb_matcher.observability import metrics as metrics_module, tracing as tracing_module
from kb_matcher.observability.context import update_span_id
from kb_matcher.search.matcher import KnowledgeBaseMatcher


def _record(msg: str = "test message", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="kb_matcher.search.matcher",
        level=level,
        pathname="matcher.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.mark.unit
class TestJsonFormatter:
    """Tests for structured JSON logging."""

    def test_format_includes_trace_context(self):
        data = json.loads(JsonFormatter().format(_record()))

        assert data["message"] == "test message"
        assert data["level"] == "INFO"
        assert data["component"] == "matcher"
        assert "timestamp" in data
        assert "trace_id" in data
        assert "span_id" in data

    def test_format_includes_extra_fields(self):
        record = _record()
        record.outcome = "matched"
        record.query_tokens = 4
        data = json.loads(JsonFormatter().format(record))

        assert data["outcome"] == "matched"
        assert data["query_tokens"] == 4

    def test_format_truncates_and_redacts(self):
        record = _record("x" * 5000)
        record.user_id = "user-42"
        data = json.loads(JsonFormatter().format(record))

        assert data["message"].endswith("...")
        assert data["user_id"] == "[REDACTED]"

    def test_format_includes_session(self):
        with message_trace(session="chat-1"):
            data = json.loads(JsonFormatter().format(_record()))
        assert data["session"] == "chat-1"

    def test_extra_fields_of_non_json_types(self):
        formatter = JsonFormatter()
        record = logging.LogRecord("kb_matcher.cli", logging.INFO, "", 0, "Loaded", (), None)
        record.tokens = ("volunteer", "join")
        record.tags = {"faq", "about"}
        record.raw = b"ok"
        record.path = Path("pages.json")

        data = json.loads(formatter.format(record))
        assert data["tokens"] == ["volunteer", "join"]
        assert data["tags"] == ["about", "faq"]
        assert data["raw"] == "ok"
        assert data["path"] == "pages.json"


@pytest.mark.unit
class TestConfigureLogging:
    def test_installs_single_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging("debug", json_output=True, logger_levels={"kb_matcher.search": "warning"})
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
            assert root.level == logging.DEBUG
            assert logging.getLogger("kb_matcher.search").level == logging.WARNING

            configure_logging("info", json_output=False)
            assert not isinstance(root.handlers[0].formatter, JsonFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            logging.getLogger("kb_matcher.search").setLevel(logging.NOTSET)

    def test_writes_to_given_stream(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        stream = io.StringIO()
        try:
            configure_logging("info", json_output=True, stream=stream)
            logging.getLogger("kb_matcher.test").info("Knowledge base loaded", extra={"documents": 3})
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        record = json.loads(stream.getvalue().splitlines()[-1])
        assert record["message"] == "Knowledge base loaded"
        assert record["documents"] == 3


@pytest.mark.unit
class TestTraceContext:
    """Tests for trace context propagation."""

    def test_get_trace_context_generates_ids(self):
        ctx = get_trace_context()
        assert len(ctx["trace_id"]) == 32
        assert len(ctx["span_id"]) == 16

    def test_update_span_id_preserves_trace_id(self):
        token = set_trace_context("aa" * 16, "bb" * 8, session="chat-9")
        update_span_id("cc" * 8)
        ctx = get_trace_context()
        trace_context.reset(token)
        assert ctx["trace_id"] == "aa" * 16
        assert ctx["span_id"] == "cc" * 8
        assert ctx["session"] == "chat-9"

    def test_message_trace_binds_fresh_ids_and_session(self):
        with message_trace(session="chat-1") as first:
            assert get_trace_context()["session"] == "chat-1"
        with message_trace(session="chat-1") as second:
            pass
        assert first["trace_id"] != second["trace_id"]

    def test_message_trace_restores_outer_context(self):
        outer = set_trace_context("aa" * 16, "bb" * 8)
        try:
            with message_trace() as inner:
                assert "session" not in inner
                update_span_id("cc" * 8)
            assert get_trace_context()["trace_id"] == "aa" * 16
            assert get_trace_context()["span_id"] == "bb" * 8
        finally:
            trace_context.reset(outer)


@pytest.mark.unit
class TestTracing:
    """Tests for OpenTelemetry tracing."""

    def test_init_tracing_applies_resource_attributes(self):
        tracing_module._tracer_holder.update({"tracer": None, "provider": None})
        provider = init_tracing("test-service", resource_attributes={"service.version": "2.0.0"})
        assert provider.resource.attributes["service.version"] == "2.0.0"

    def test_create_span_context_manager(self):
        init_tracing("test-service")
        with create_span("kb.match", attributes={"kb.documents": 3}) as span:
            span.set_attribute("kb.score", 0.5)

    def test_init_tracing_is_idempotent(self):
        provider = init_tracing("test-service")
        assert init_tracing("other-service") is provider

    def test_match_span_records_attributes(self, seed_documents):
        tracing_module._tracer_holder.update({"tracer": None, "provider": None})
        provider = init_tracing("test-service")
        exporter = InMemorySpanExporter()
        provider.add_span_processor(SimpleSpanProcessor(exporter))

        result = KnowledgeBaseMatcher().find_best_match("How can I volunteer?", seed_documents)

        (span,) = [span for span in exporter.get_finished_spans() if span.name == "kb.match"]
        assert span.attributes["kb.documents"] == len(seed_documents)
        assert span.attributes["kb.threshold"] == 0.4
        assert span.attributes["kb.query_tokens"] > 0
        assert span.attributes["kb.score"] == pytest.approx(result.score)

    def test_create_span_reraises(self):
        with pytest.raises(RuntimeError, match="boom"), create_span("kb.match"):
            raise RuntimeError("boom")

    def test_get_tracer_initializes_when_missing(self):
        tracing_module._tracer_holder["tracer"] = None
        assert tracing_module.get_tracer() is not None


@pytest.mark.unit
class TestMetrics:
    def test_init_metrics_creates_provider(self):
        metrics_module._meter_holder.update({"meter": None, "provider": None})
        provider = init_metrics("test-service", {"service.version": "1.0.0"})
        assert isinstance(provider, MeterProvider)
        assert init_metrics("test-service") is provider

        MATCH_COUNT.labels(outcome="matched").inc()
        MATCH_LATENCY.labels(outcome="matched").observe(0.002)
        CHAT_REPLY_COUNT.labels(match_type="intent").inc()

    def test_get_meter_initializes_when_missing(self):
        metrics_module._meter_holder.update({"meter": None, "provider": None})
        assert metrics_module._get_meter() is not None

    def test_metric_bridge_unknown_kind_raises(self):
        bad_metric = metrics_module.MetricBridge(
            metrics_module._MATCH_COUNT_PROM,
            otel_name="bad_metric",
            otel_description="bad",
            otel_kind="unknown",
        )
        with pytest.raises(ValueError, match="Unknown metric kind"):
            bad_metric.inc({"outcome": "matched"}, 1.0)

    def test_exposition_lists_matcher_metrics(self):
        MATCH_COUNT.labels(outcome="no_match").inc()
        body = get_metrics().decode()
        assert "kb_match_total" in body
        assert "kb_match_latency_seconds" in body
