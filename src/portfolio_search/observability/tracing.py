"""OpenTelemetry spans for index loads, match stages and HTTP requests.

No exporter is installed: spans exist so that every log line emitted while
a query runs can carry the id of the stage it belongs to.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import Span, SpanKind
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from portfolio_search import __version__
from portfolio_search.observability.context import bind_request, update_span_id


SERVICE_NAME = "portfolio-search"
TRACE_HEADER = "x-trace-id"
INSTRUMENTATION_NAME = "portfolio_search"


def init_tracing(service_name: str = SERVICE_NAME) -> TracerProvider:
    """Install the SDK provider so spans get real ids; call once per process."""
    provider = TracerProvider(resource=Resource.create({"service.name": service_name, "service.version": __version__}))
    trace.set_tracer_provider(provider)
    return provider


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Mapping[str, Any] | None = None,
) -> Iterator[Span]:
    """Open a span and publish its id to the logging context.

    Exceptions are recorded on the span and re-raised unchanged.
    """
    tracer = trace.get_tracer(INSTRUMENTATION_NAME, __version__)
    with tracer.start_as_current_span(
        name,
        kind=kind,
        attributes=dict(attributes or {}),
        record_exception=True,
        set_status_on_exception=True,
    ) as span:
        span_context = span.get_span_context()
        if span_context.is_valid:
            update_span_id(trace.format_span_id(span_context.span_id))
        yield span


class TraceContextMiddleware:
    """Bind the caller's ``x-trace-id`` (or a fresh one) to the request and echo it back."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        with bind_request(Headers(scope=scope).get(TRACE_HEADER), path=path) as ctx:

            async def send_with_trace_id(message: Message) -> None:
                if message["type"] == "http.response.start":
                    MutableHeaders(scope=message)[TRACE_HEADER] = ctx["trace_id"]
                await send(message)

            with create_span("http.request", kind=SpanKind.SERVER, attributes={"http.route": path}):
                await self.app(scope, receive, send_with_trace_id)
