"""Per-message trace context for correlating chat log records.

Each chat message gets a fresh trace id, and the conversation id travels
along as ``session`` so every log line for one reply can be grouped.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Get current trace context, creating ids outside any message."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> Token:
    """Set trace context for the current context, e.g. ``session=<chat id>``."""
    return trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_span_id(span_id: str) -> None:
    """Update span_id while preserving trace_id and session."""
    ctx = trace_context.get() or {}
    trace_context.set({**ctx, "span_id": span_id})


@contextmanager
def message_trace(session: str | None = None) -> Iterator[dict]:
    """Bind a fresh trace to one chat message and restore the outer one after."""
    extra = {"session": session} if session else {}
    token = set_trace_context(generate_trace_id(), generate_span_id(), **extra)
    try:
        yield trace_context.get()
    finally:
        trace_context.reset(token)
