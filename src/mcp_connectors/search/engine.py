"""Query engine scoring records of a :class:`RecordIndex`.

Scores are token-coverage ratios in [0, 1]: each distinct query term earns
credit from its best match in the record, and the score is the mean credit.

Match credit per query term:
- exact token match: 1.0
- query term contained in a longer record token: 0.9
- closest token within the edit budget: 0.8 for 1 edit, 0.6 for 2 edits

Credit is scaled by the matched token's field weight relative to the record's
heaviest field, so a hit in ``title`` outranks the same hit in bulk text of
the same record. The scaling is per record: a record whose only hit sits in
bulk text next to an unmatched ``title`` earns 1.0 / 1.5 for that term, and
drops out at thresholds above that value. Use ``boost`` to flatten weights
when every field should count equally.

Typo candidates are looked up once per query term in the index vocabulary;
each record then only checks which of those candidates it contains.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging

from mcp_connectors.observability.metrics import SEARCH_LATENCY, track_latency
from mcp_connectors.search.fuzzy import candidate_terms, fuzzy_credit
from mcp_connectors.search.models import IndexedRecord, RecordIndex, SearchResult


logger = logging.getLogger(__name__)

_SUBSTRING_CREDIT = 0.9
_MIN_SUBSTRING_LENGTH = 2

FuzzyCandidates = Mapping[str, Sequence[tuple[str, int]]]


def _term_credit(term: str, entry: IndexedRecord, candidates: Sequence[tuple[str, int]]) -> float:
    weights = entry.term_weights
    if term in weights:
        return weights[term]

    best = 0.0
    if len(term) >= _MIN_SUBSTRING_LENGTH:
        for token, weight in weights.items():
            if term in token:
                best = max(best, _SUBSTRING_CREDIT * weight)
    if best:
        return best

    for token, distance in candidates:  # nearest first
        if token in weights:
            return fuzzy_credit(distance) * weights[token]
    return 0.0


def score_record(
    terms: list[str],
    entry: IndexedRecord,
    fuzzy_candidates: FuzzyCandidates | None = None,
) -> tuple[float, tuple[str, ...]]:
    """Return ``(score, matched_terms)`` for one record.

    ``fuzzy_candidates`` maps each query term to its typo candidates; terms
    without an entry only match exactly or by containment.
    """

    if not terms or entry.is_empty:
        return 0.0, ()

    candidates = fuzzy_candidates or {}
    total = 0.0
    matched: list[str] = []
    for term in terms:
        credit = _term_credit(term, entry, candidates.get(term, ()))
        if credit > 0:
            total += credit
            matched.append(term)
    return min(total / len(terms), 1.0), tuple(matched)


def search(index: RecordIndex, query: str) -> list[SearchResult]:
    """Rank the records of ``index`` against a free-text ``query``.

    The query goes through the analyzer the index was built with. Returns at
    most ``max_results`` results, each with ``score >= threshold``, sorted by
    descending score with ties kept in input order. Empty or whitespace-only
    queries, and queries nothing matches, return ``[]``.

    Raises:
        TypeError: ``index`` was not produced by ``create_index``.
    """

    if not isinstance(index, RecordIndex):
        raise TypeError(f"search() expects a RecordIndex, got {type(index).__name__}")
    if not query or not query.strip() or not index.records:
        return []

    terms = index.analyzer.terms(query)
    if not terms:
        return []

    options = index.options
    with track_latency(SEARCH_LATENCY):
        fuzzy_candidates: dict[str, list[tuple[str, int]]] = {}
        if options.fuzzy:
            fuzzy_candidates = {term: candidate_terms(term, index.vocabulary) for term in terms}

        scored: list[tuple[float, int, SearchResult]] = []
        for entry in index.records:
            score, matches = score_record(terms, entry, fuzzy_candidates)
            if score <= 0 or score < options.threshold:
                continue
            scored.append((-score, entry.position, SearchResult(item=entry.item, score=score, matches=matches)))

        scored.sort(key=lambda row: (row[0], row[1]))
        results = [row[2] for row in scored[: options.max_results]]

    logger.debug(
        "Search for %d terms matched %d of %d records (returning %d)",
        len(terms),
        len(scored),
        len(index.records),
        len(results),
    )
    return results
