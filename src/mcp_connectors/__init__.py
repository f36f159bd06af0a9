"""Catalog of MCP connectors with an in-process lexical record search."""

from mcp_connectors.errors import ConfigurationError
from mcp_connectors.search import RecordIndex, SearchOptions, SearchResult, create_index, search


__version__ = "0.1.0"

__all__ = ["ConfigurationError", "RecordIndex", "SearchOptions", "SearchResult", "create_index", "search"]
