"""Observability module: structured logging, OpenTelemetry tracing and Prometheus metrics."""

from portfolio_search.observability.context import bind_request, get_request_context
from portfolio_search.observability.logging import JsonFormatter, configure_logging
from portfolio_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_LOAD_FAILURES,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    STAGE_HITS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)


__all__ = [
    "INDEX_DOC_COUNT",
    "INDEX_LOAD_FAILURES",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "STAGE_HITS",
    "JsonFormatter",
    "TraceContextMiddleware",
    "bind_request",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_request_context",
    "init_tracing",
    "track_latency",
]
