"""Article and author records stored as hashes in a key-value store.

Each record lives at ``<Keyspace>:<id>`` and its id is added to a set at
``<Keyspace>``, so the search index can select articles by key prefix and
the seeder can pick random authors from the id set.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


class StorageError(Exception):
    """The record store could not be reached or refused a command."""

    kind = "backend_failure"


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for the key-value store holding records."""

    def put(self, key: str, mapping: dict[str, str]) -> None:
        ...

    def get(self, key: str) -> dict[str, str] | None:
        ...

    def scan(self, prefix: str) -> Iterator[tuple[str, dict[str, str]]]:
        """Yield (key, record) for every record whose key starts with prefix."""
        ...

    def add_member(self, set_key: str, member: str) -> None:
        ...

    def members(self, set_key: str) -> set[str]:
        ...

    def random_member(self, set_key: str) -> str | None:
        ...

    def close(self) -> None:
        """Release the connection, if any."""
        ...


@dataclass
class Author:
    id: str | None
    name: str


@dataclass
class Article:
    id: str | None
    title: str
    price: float
    authors: set[str] = field(default_factory=set)  # author ids

    def add_author(self, author_id: str) -> None:
        self.authors.add(author_id)


class _HashRepository:
    keyspace: str = ""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    @classmethod
    def key_for(cls, record_id: str) -> str:
        return f"{cls.keyspace}:{record_id}"

    def save(self, record):
        if record.id is None:
            record.id = uuid.uuid4().hex
        self._store.put(self.key_for(record.id), self._to_mapping(record))
        self._store.add_member(self.keyspace, record.id)
        return record

    def find(self, record_id: str):
        mapping = self._store.get(self.key_for(record_id))
        if mapping is None:
            return None
        return self._from_mapping(record_id, mapping)

    def find_all(self) -> list:
        records = []
        for record_id in sorted(self._store.members(self.keyspace)):
            record = self.find(record_id)
            if record is not None:
                records.append(record)
        return records

    def count(self) -> int:
        return len(self._store.members(self.keyspace))

    def random_id(self) -> str | None:
        return self._store.random_member(self.keyspace)

    def _to_mapping(self, record) -> dict[str, str]:
        raise NotImplementedError

    def _from_mapping(self, record_id: str, mapping: dict[str, str]):
        raise NotImplementedError


class AuthorRepository(_HashRepository):
    keyspace = "Author"

    def _to_mapping(self, author: Author) -> dict[str, str]:
        return {"name": author.name}

    def _from_mapping(self, record_id: str, mapping: dict[str, str]) -> Author:
        return Author(id=record_id, name=mapping.get("name", ""))


class ArticleRepository(_HashRepository):
    keyspace = "Article"

    def _to_mapping(self, article: Article) -> dict[str, str]:
        # Authors are stored as references to their own hashes.
        return {
            "title": article.title,
            "price": f"{article.price:.2f}",
            "authors": ",".join(sorted(AuthorRepository.key_for(a) for a in article.authors)),
        }

    def _from_mapping(self, record_id: str, mapping: dict[str, str]) -> Article:
        refs = [ref for ref in mapping.get("authors", "").split(",") if ref]
        return Article(
            id=record_id,
            title=mapping.get("title", ""),
            price=float(mapping.get("price", 0.0)),
            authors={ref.split(":", 1)[1] for ref in refs},
        )


def get_store(config) -> RecordStore:
    """Resolve the configured backend name to a record store."""
    if config.backend == "redis":
        from .redis_store import RedisRecordStore

        return RedisRecordStore.from_config(config)
    elif config.backend == "memory":
        from .memory import MemoryRecordStore

        return MemoryRecordStore()
    else:
        raise ValueError(
            f"Unknown storage backend: {config.backend!r}. Use 'redis' or 'memory'."
        )
