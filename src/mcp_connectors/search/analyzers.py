"""Analyzer utilities for record search.

Follows a composable tokenizer/filter design: a tokenizer yields raw word
tokens and filters normalize the stream. Records and queries must go through
the same analyzer so their tokens are comparable.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int
    field: str = ""

    def copy_with(self, **updates: object) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
            "field": self.field,
        }
        data.update(updates)
        return Token(**data)  # type: ignore[arg-type]


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str, field: str = "") -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class RegexTokenizer:
    """Splits text on non-alphanumeric boundaries.

    The default pattern matches runs of Unicode letters and digits, so
    punctuation, whitespace and underscores all act as separators.
    """

    def __init__(self, pattern: str = r"[^\W_]+", flags: int = re.UNICODE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str, field: str = "") -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
                field=field,
            )


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower() or not any(ch.isalpha() for ch in token.text):
                yield token
            else:
                yield token.copy_with(text=token.text.lower())


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = 1) -> None:
        self.min_length = max(min_length, 1)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str, field: str = "") -> list[Token]:
        if not text:
            return []
        stream: Iterable[Token] = self.tokenizer(text, field)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class RecordAnalyzer:
    """Analyzer shared by the indexer and the query engine."""

    def __init__(self, *, min_length: int = 1) -> None:
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), [LowercaseFilter(), MinLengthFilter(min_length)])

    def __call__(self, text: str, field: str = "") -> list[Token]:
        return self.pipeline(text, field)

    def terms(self, text: str) -> list[str]:
        """Return distinct token texts in first-seen order."""

        seen: set[str] = set()
        ordered: list[str] = []
        for token in self(text):
            if token.text in seen:
                continue
            seen.add(token.text)
            ordered.append(token.text)
        return ordered


DEFAULT_ANALYZER = RecordAnalyzer()
