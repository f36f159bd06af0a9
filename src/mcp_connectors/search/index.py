"""Index construction for record search.

``create_index`` turns a sequence of weakly-typed records into an immutable
:class:`RecordIndex`. Each record keeps its original object plus per-term
field weights, and the index keeps the analyzer and the shared vocabulary;
nothing is persisted and no I/O happens here.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
from types import MappingProxyType
from typing import Any

from mcp_connectors.errors import ConfigurationError
from mcp_connectors.search.analyzers import DEFAULT_ANALYZER, RecordAnalyzer
from mcp_connectors.search.flatten import MalformedRecordError, flatten_record
from mcp_connectors.search.models import IndexedRecord, Record, RecordIndex, SearchOptions


logger = logging.getLogger(__name__)

# Substring rules applied to the last path segment, first match wins
_FIELD_WEIGHT_RULES: tuple[tuple[tuple[str, ...], float], ...] = (
    (("title", "name"), 1.5),
    (("label", "tag"), 1.3),
    (("description", "summary"), 1.2),
)


def field_weight(path: str, boost: Mapping[str, float] | None = None) -> float:
    """Return the scoring weight for a dotted field path.

    Explicit ``boost`` entries match either the full path or its last
    segment. Otherwise identity-like fields (``title``, ``name``) outrank
    bulk text.
    """

    segment = path.rsplit(".", 1)[-1].lower()
    if boost:
        if path in boost:
            return boost[path]
        if segment in boost:
            return boost[segment]
    for needles, weight in _FIELD_WEIGHT_RULES:
        if any(needle in segment for needle in needles):
            return weight
    return 1.0


def _index_record(
    position: int,
    record: Record,
    options: SearchOptions,
    analyzer: RecordAnalyzer,
) -> IndexedRecord:
    try:
        pairs = flatten_record(record, options.fields)
    except (MalformedRecordError, RecursionError, TypeError) as exc:
        logger.warning("Record %d could not be indexed, leaving it unsearchable: %s", position, exc)
        pairs = []

    token_count = 0
    raw_weights: dict[str, float] = {}
    for path, text in pairs:
        weight = field_weight(path, options.boost)
        for token in analyzer(text, path):
            token_count += 1
            if weight > raw_weights.get(token.text, 0.0):
                raw_weights[token.text] = weight

    # relative to the record's heaviest field
    top_weight = max(raw_weights.values(), default=1.0)
    weights = {term: weight / top_weight for term, weight in raw_weights.items()}
    return IndexedRecord(
        position=position,
        item=record,
        term_weights=MappingProxyType(weights),
        token_count=token_count,
    )


def create_index(
    records: Sequence[Record],
    options: SearchOptions | Mapping[str, Any] | None = None,
    *,
    analyzer: RecordAnalyzer | None = None,
    **overrides: Any,
) -> RecordIndex:
    """Build an immutable search index over ``records``.

    Args:
        records: Records to index, in caller order. Never mutated.
        options: ``SearchOptions`` or a mapping of option values.
        analyzer: Tokenizer for record text; stored on the index and reused
            for every query against it.
        **overrides: Individual option values, e.g. ``max_results=5``.

    Raises:
        ConfigurationError: Options are out of range or the collection is
            larger than ``max_records``.
    """

    if isinstance(options, SearchOptions):
        resolved = options
        if overrides:
            current = {name: getattr(options, name) for name in SearchOptions.model_fields}
            current["boost"] = dict(options.boost)
            resolved = SearchOptions.build(**{**current, **overrides})
    else:
        resolved = SearchOptions.build(**{**dict(options or {}), **overrides})

    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Sequence):
        raise ConfigurationError(f"records must be a sequence of mappings, got {type(records).__name__}")
    if len(records) > resolved.max_records:
        raise ConfigurationError(
            f"Refusing to index {len(records)} records; limit is {resolved.max_records}"
        )

    active_analyzer = analyzer or DEFAULT_ANALYZER
    indexed = tuple(
        _index_record(position, record, resolved, active_analyzer) for position, record in enumerate(records)
    )
    vocabulary = frozenset(term for entry in indexed for term in entry.term_weights)

    logger.debug(
        "Built search index with %d records and %d distinct terms",
        len(indexed),
        len(vocabulary),
    )
    return RecordIndex(records=indexed, options=resolved, vocabulary=vocabulary, analyzer=active_analyzer)
