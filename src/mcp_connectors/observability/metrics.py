"""Prometheus metrics for connector tool calls and record search."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


REQUEST_LATENCY = Histogram(
    "mcp_tool_latency_seconds",
    "Tool call latency in seconds",
    ["connector", "tool"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

REQUEST_COUNT = Counter(
    "mcp_tool_calls_total",
    "Total MCP tool calls",
    ["connector", "tool", "status"],
)

ERROR_COUNT = Counter(
    "mcp_tool_errors_total",
    "Tool calls that failed upstream",
    ["connector", "error_type"],
)

SEARCH_LATENCY = Histogram(
    "record_search_latency_seconds",
    "Record search query latency",
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

INDEX_RECORD_COUNT = Gauge(
    "record_index_size",
    "Records in the most recently built search index",
    ["connector"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if labels:
            histogram.labels(**labels).observe(elapsed)
        else:
            histogram.observe(elapsed)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
