"""Projection of weakly-typed records onto searchable text.

Records are arbitrary JSON-like trees. Flattening walks the tree read-only
and yields one ``(field_path, text)`` pair per leaf; the caller's object is
never modified or copied.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from numbers import Number
from typing import Any


MAX_DEPTH = 32


class MalformedRecordError(ValueError):
    """A record cannot be projected onto text."""


def leaf_text(value: Any) -> str | None:
    """Stringify a scalar leaf; ``None`` for values with no text."""

    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Number):
        return str(value)
    return None


def flatten_record(record: Any, fields: Sequence[str] | None = None) -> list[tuple[str, str]]:
    """Return ``(field_path, text)`` pairs for every textual leaf of ``record``.

    Args:
        record: Mapping of field name to JSON-like value.
        fields: Optional dotted paths restricting which subtrees are read.

    Raises:
        MalformedRecordError: The record is not a mapping or nests deeper
            than ``MAX_DEPTH``.
    """

    if not isinstance(record, Mapping):
        raise MalformedRecordError(f"Expected a mapping, got {type(record).__name__}")

    pairs: list[tuple[str, str]] = []
    if fields:
        for path in fields:
            found, value = resolve_path(record, path)
            if found:
                pairs.extend(_walk(value, path, {id(record)}, 1))
        return pairs

    pairs.extend(_walk(record, "", set(), 0))
    return pairs


def resolve_path(record: Mapping[str, Any], path: str) -> tuple[bool, Any]:
    """Resolve a dotted path such as ``user.profile.name``."""

    current: Any = record
    for key in path.split("."):
        if isinstance(current, Mapping) and key in current:
            current = current[key]
        else:
            return False, None
    return True, current


def _walk(value: Any, path: str, ancestors: set[int], depth: int) -> Iterator[tuple[str, str]]:
    if depth > MAX_DEPTH:
        raise MalformedRecordError(f"Record nests deeper than {MAX_DEPTH} levels at '{path}'")

    text = leaf_text(value)
    if text is not None:
        if text:
            yield path, text
        return

    if isinstance(value, Mapping):
        children: Iterator[tuple[str, Any]] = ((str(key), child) for key, child in value.items())
        join = True
    elif isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        children = ((path, child) for child in value)
        join = False
    else:
        return

    marker = id(value)
    if marker in ancestors:  # circular reference
        return
    ancestors.add(marker)
    try:
        for key, child in children:
            child_path = (f"{path}.{key}" if path else key) if join else key
            yield from _walk(child, child_path, ancestors, depth + 1)
    finally:
        ancestors.discard(marker)
