"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from kb_matcher.observability.context import get_trace_context, message_trace, set_trace_context, trace_context
from kb_matcher.observability.logging import JsonFormatter, configure_logging
from kb_matcher.observability.metrics import (
    CHAT_REPLY_COUNT,
    MATCH_COUNT,
    MATCH_LATENCY,
    RATE_LIMITED_COUNT,
    get_metrics,
    init_metrics,
)
from kb_matcher.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "CHAT_REPLY_COUNT",
    "MATCH_COUNT",
    "MATCH_LATENCY",
    "RATE_LIMITED_COUNT",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "message_trace",
    "set_trace_context",
    "trace_context",
]
