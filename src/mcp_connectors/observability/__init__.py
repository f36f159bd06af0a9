"""Observability module for tracing, metrics, and logging."""

from mcp_connectors.observability.context import get_trace_context, set_trace_context, trace_context
from mcp_connectors.observability.logging import JsonFormatter, configure_logging
from mcp_connectors.observability.metrics import (
    ERROR_COUNT,
    INDEX_RECORD_COUNT,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    SEARCH_LATENCY,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from mcp_connectors.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "ERROR_COUNT",
    "INDEX_RECORD_COUNT",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
