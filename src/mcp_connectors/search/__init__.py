"""
Lexical record search package.

This package provides an in-process, build-once/query-many search stack:
- analyzers: Tokenizer and filters shared by indexing and querying
- flatten: Read-only projection of JSON-like records onto field text
- fuzzy: Edit-distance helpers for typo tolerance
- index: ``create_index`` building an immutable ``RecordIndex``
- engine: ``search`` scoring and ranking records against a query
"""

from mcp_connectors.search.engine import search
from mcp_connectors.search.index import create_index
from mcp_connectors.search.models import RecordIndex, SearchOptions, SearchResult


__all__ = ["RecordIndex", "SearchOptions", "SearchResult", "create_index", "search"]
