"""Search data models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mcp_connectors.errors import ConfigurationError
from mcp_connectors.search.analyzers import DEFAULT_ANALYZER, RecordAnalyzer


Record = Mapping[str, Any]

DEFAULT_MAX_RESULTS = 20
DEFAULT_THRESHOLD = 0.1
DEFAULT_MAX_RECORDS = 10_000


class SearchOptions(BaseModel):
    """Options fixed when an index is built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_results: int = Field(default=DEFAULT_MAX_RESULTS, gt=0)
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0.0, le=1.0)
    fields: tuple[str, ...] | None = None
    boost: Mapping[str, float] = Field(default_factory=dict)
    fuzzy: bool = True
    max_records: int = Field(default=DEFAULT_MAX_RECORDS, gt=0)

    @field_validator("boost")
    @classmethod
    def _check_boost(cls, value: Mapping[str, float]) -> Mapping[str, float]:
        for name, weight in value.items():
            if weight <= 0:
                raise ValueError(f"boost for '{name}' must be positive, got {weight}")
        return MappingProxyType(dict(value))

    @classmethod
    def build(cls, **values: Any) -> SearchOptions:
        """Validate ``values``, reporting failures as :class:`ConfigurationError`."""

        try:
            return cls(**values)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'options'}: {err['msg']}" for err in exc.errors()
            )
            raise ConfigurationError(f"Invalid search options: {problems}") from exc


@dataclass(frozen=True)
class IndexedRecord:
    """Derived token data for one record plus a reference to the original."""

    position: int
    item: Record
    term_weights: Mapping[str, float]
    token_count: int

    @property
    def is_empty(self) -> bool:
        return self.token_count == 0


@dataclass(frozen=True)
class RecordIndex:
    """Immutable, queryable structure built once from a record collection.

    Queries are tokenized with ``analyzer``, the same one that built the index.
    """

    records: tuple[IndexedRecord, ...]
    options: SearchOptions
    vocabulary: frozenset[str]
    analyzer: RecordAnalyzer = DEFAULT_ANALYZER

    @property
    def items(self) -> list[Record]:
        return [entry.item for entry in self.records]

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class SearchResult:
    """A matched record with its relevance score in [0, 1]."""

    item: Record
    score: float
    matches: tuple[str, ...] = ()
