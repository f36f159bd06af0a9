"""Fuzzy matching for typo-tolerant record search.

Edit budgets scale with term length:
- 1-2 chars: exact only (too many false positives otherwise)
- 3-5 chars: 1 edit
- 6+ chars: 2 edits
"""

from __future__ import annotations

from collections.abc import Iterable


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Args:
        s1: First string.
        s2: Second string.
        max_distance: If provided, return ``max_distance + 1`` as soon as the
            distance is known to exceed it.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("helo", "hello")
        1
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)
    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def get_max_edit_distance(term_length: int) -> int:
    """Return the edit budget for a query term of ``term_length`` characters."""
    if term_length <= 2:
        return 0
    if term_length <= 5:
        return 1
    return 2


def candidate_terms(query_term: str, vocabulary: Iterable[str]) -> list[tuple[str, int]]:
    """List vocabulary terms within ``query_term``'s edit budget, nearest first.

    Exact matches are ignored (callers handle them separately). Ties on
    distance resolve alphabetically so results do not depend on set order.
    """
    max_distance = get_max_edit_distance(len(query_term))
    if max_distance == 0:
        return []

    candidates: list[tuple[str, int]] = []
    for term in vocabulary:
        if term == query_term or abs(len(term) - len(query_term)) > max_distance:
            continue
        distance = levenshtein_distance(query_term, term, max_distance)
        if distance <= max_distance:
            candidates.append((term, distance))
    candidates.sort(key=lambda candidate: (candidate[1], candidate[0]))
    return candidates


def fuzzy_credit(distance: int) -> float:
    """Convert an edit distance into match credit: 1 edit = 0.8, 2 edits = 0.6."""
    if distance <= 0:
        return 1.0
    return max(0.0, 0.8 - 0.2 * (distance - 1))
