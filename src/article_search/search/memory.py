"""In-process search engine over a RecordStore, ranked with rank-bm25."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from . import (
    FieldKind,
    IndexDefinition,
    NumericFilter,
    SearchDocument,
    SearchQuery,
    SearchResultSet,
)
from .backend import DEFAULT_LIMIT, CommandRejected, UnknownIndex

_LOGGER = logging.getLogger(__name__)

_STOPWORDS = frozenset({
    "the", "a", "an", "is", "are", "was", "were", "in", "on", "at",
    "to", "for", "of", "and", "or", "but", "not", "with", "by", "from",
})

_MATCH_ALL = ("", "*")


def _tokenize(text: str) -> list[str]:
    """Lowercase, strip punctuation, remove stopwords."""
    text = text.lower()
    text = re.sub(r"[^\w\s]", " ", text)
    return [w for w in text.split() if w and w not in _STOPWORDS]


def _check_syntax(raw: str) -> None:
    if raw.count('"') % 2:
        raise CommandRejected(f"Syntax error: unterminated quote in {raw!r}")
    depth = 0
    for ch in raw:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                break
    if depth != 0:
        raise CommandRejected(f"Syntax error: unbalanced parentheses in {raw!r}")


def _in_range(record: dict[str, str], numeric_filter: NumericFilter) -> bool:
    try:
        value = float(record[numeric_filter.field])
    except (KeyError, ValueError):
        return False
    return numeric_filter.min <= value <= numeric_filter.max


def _project(record: dict[str, str], return_fields: tuple[str, ...]) -> dict[str, str]:
    if not return_fields:
        return dict(record)
    return {name: record[name] for name in return_fields if name in record}


class MemoryIndexHandle:
    def __init__(self, engine: MemorySearchEngine, name: str) -> None:
        self.name = name
        self._engine = engine

    def create(self, definition: IndexDefinition) -> None:
        with self._engine._lock:
            if self.name in self._engine._indexes:
                raise CommandRejected("Index already exists")
            self._engine._indexes[self.name] = definition

    def drop(self) -> None:
        with self._engine._lock:
            if self._engine._indexes.pop(self.name, None) is None:
                raise UnknownIndex("Unknown Index name")

    def exists(self) -> bool:
        return self.name in self._engine._indexes

    def search(self, query: SearchQuery) -> SearchResultSet:
        definition = self._engine.definition(self.name)
        if definition is None:
            raise UnknownIndex(f"{self.name}: no such index")
        _check_syntax(query.raw_query)

        numeric_filter = query.numeric_filter
        if numeric_filter is not None:
            spec = definition.schema.get(numeric_filter.field)
            if spec is None or spec.kind is not FieldKind.NUMERIC:
                raise CommandRejected(f"Unknown numeric field {numeric_filter.field!r}")

        candidates = [
            (key, record)
            for key, record in self._engine.store.scan(definition.key_prefix)
            if numeric_filter is None or _in_range(record, numeric_filter)
        ]

        raw = query.raw_query.strip()
        if raw in _MATCH_ALL:
            ranked = sorted(candidates, key=lambda c: c[0])
        else:
            ranked = self._rank(definition, candidates, _tokenize(raw))

        offset = query.offset or 0
        limit = query.limit if query.limit is not None else DEFAULT_LIMIT
        documents = [
            SearchDocument(doc_id=key, fields=_project(record, query.return_fields))
            for key, record in ranked[offset:offset + limit]
        ]
        _LOGGER.debug("Query %r on %s matched %d record(s)", raw, self.name, len(ranked))
        return SearchResultSet(total=len(ranked), documents=documents)

    def _rank(
        self,
        definition: IndexDefinition,
        candidates: list[tuple[str, dict[str, str]]],
        terms: list[str],
    ) -> list[tuple[str, dict[str, str]]]:
        """Keep records containing every term, best BM25 score first."""
        if not terms:
            return []
        text_fields = [s.name for s in definition.schema.fields if s.kind is FieldKind.TEXT]
        corpus = [
            _tokenize(" ".join(record.get(name, "") for name in text_fields))
            for _, record in candidates
        ]
        wanted = set(terms)
        matches = [i for i, tokens in enumerate(corpus) if wanted <= set(tokens)]
        if not matches:
            return []

        from rank_bm25 import BM25Okapi

        scores = BM25Okapi(corpus).get_scores(terms)
        matches.sort(key=lambda i: (-scores[i], candidates[i][0]))
        return [candidates[i] for i in matches]


class MemorySearchEngine:
    """Search engine kept in process memory.

    Behaves like the Redis engine: an index covers every record in the store
    whose key starts with the definition's prefix, including records written
    after the index was created. Text field weights are not applied.
    """

    def __init__(self, store) -> None:
        self.store = store
        self.open_handles = 0
        self._indexes: dict[str, IndexDefinition] = {}
        self._lock = threading.Lock()

    def definition(self, name: str) -> IndexDefinition | None:
        return self._indexes.get(name)

    @contextmanager
    def open(self, name: str) -> Iterator[MemoryIndexHandle]:
        with self._lock:
            self.open_handles += 1
        try:
            yield MemoryIndexHandle(self, name)
        finally:
            with self._lock:
                self.open_handles -= 1
