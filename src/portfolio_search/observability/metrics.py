"""Prometheus metrics for the query engine."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_REQUESTS = Counter(
    "portfolio_search_requests_total",
    "Total search queries",
    ["outcome"],
)

SEARCH_LATENCY = Histogram(
    "portfolio_search_latency_seconds",
    "Search query latency",
    ["phase"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

STAGE_HITS = Counter(
    "portfolio_search_stage_hits_total",
    "Raw hits produced per match stage",
    ["stage"],
)

INDEX_LOAD_FAILURES = Counter(
    "portfolio_search_index_load_failures_total",
    "Index loads that degraded to an empty index",
    ["source"],
)

INDEX_DOC_COUNT = Gauge(
    "portfolio_search_index_documents",
    "Documents in the most recently loaded index",
    ["type"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
