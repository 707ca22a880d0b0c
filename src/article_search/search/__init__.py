"""Index schema, query and result types shared by every search engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FieldKind(Enum):
    TEXT = "text"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class FieldSpec:
    """One indexed record field."""

    name: str
    kind: FieldKind
    sortable: bool = False
    weight: float = 1.0  # only meaningful for TEXT fields


@dataclass(frozen=True)
class IndexSchema:
    fields: tuple[FieldSpec, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def validate(self) -> None:
        """Raise a SchemaError if the schema is empty or repeats a field name."""
        from .schema import validate_schema

        validate_schema(self)


@dataclass(frozen=True)
class IndexDefinition:
    """A named index over every stored record whose key starts with key_prefix."""

    name: str
    key_prefix: str  # e.g. "Article:"
    schema: IndexSchema


@dataclass(frozen=True)
class NumericFilter:
    """Inclusive range constraint on a NUMERIC field."""

    field: str
    min: float
    max: float


@dataclass(frozen=True)
class SearchQuery:
    raw_query: str
    numeric_filter: NumericFilter | None = None
    return_fields: tuple[str, ...] = ()  # empty means every field
    limit: int | None = None
    offset: int | None = None


@dataclass
class SearchDocument:
    """A single ranked hit."""

    doc_id: str  # full record key, e.g. "Article:1f0c..."
    fields: dict[str, str] = field(default_factory=dict)


@dataclass
class SearchResultSet:
    total: int
    documents: list[SearchDocument] = field(default_factory=list)


def get_engine(config, store=None) -> "backend.SearchEngine":
    """Resolve the configured backend name to a search engine instance."""
    if config.backend == "redis":
        from .redisearch import RedisSearchEngine

        return RedisSearchEngine(
            host=config.redis_host,
            port=config.redis_port,
            db=config.redis_db,
            password=config.redis_password,
            socket_timeout=config.socket_timeout,
        )
    elif config.backend == "memory":
        from .memory import MemorySearchEngine

        if store is None:
            raise ValueError("The memory search engine needs the record store it indexes.")
        return MemorySearchEngine(store)
    else:
        raise ValueError(
            f"Unknown search backend: {config.backend!r}. Use 'redis' or 'memory'."
        )
