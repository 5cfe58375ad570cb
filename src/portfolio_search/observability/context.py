"""Request-scoped context for log and trace correlation."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4


request_context: ContextVar[dict[str, str] | None] = ContextVar("request_context", default=None)


def new_trace_id() -> str:
    return uuid4().hex


def new_span_id() -> str:
    return uuid4().hex[:16]


def get_request_context() -> dict[str, str]:
    """Current context, creating a fresh trace id on first use."""
    ctx = request_context.get()
    if not ctx or not ctx.get("trace_id"):
        ctx = {"trace_id": new_trace_id(), "span_id": new_span_id()}
        request_context.set(ctx)
    return ctx


def update_span_id(span_id: str) -> None:
    request_context.set({**get_request_context(), "span_id": span_id})


@contextmanager
def bind_request(trace_id: str | None = None, **fields: str) -> Iterator[dict[str, str]]:
    """Bind a trace id (and extra fields such as the query) for the duration of a request."""
    ctx = {"trace_id": trace_id or new_trace_id(), "span_id": new_span_id(), **fields}
    token = request_context.set(ctx)
    try:
        yield ctx
    finally:
        request_context.reset(token)
