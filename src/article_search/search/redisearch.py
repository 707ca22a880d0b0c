"""RediSearch engine using redis-py's search commands."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis
from redis.commands.search.field import NumericField, TextField
from redis.commands.search.index_definition import IndexDefinition as RedisIndexDefinition
from redis.commands.search.index_definition import IndexType
from redis.commands.search.query import NumericFilter as RedisNumericFilter
from redis.commands.search.query import Query
from redis.exceptions import RedisError, ResponseError

from . import (
    FieldKind,
    FieldSpec,
    IndexDefinition,
    SearchDocument,
    SearchQuery,
    SearchResultSet,
)
from .backend import DEFAULT_LIMIT, CommandRejected, EngineError, UnknownIndex

_LOGGER = logging.getLogger(__name__)

# Error text RediSearch uses for a missing index, across module versions.
_UNKNOWN_INDEX_MARKERS = ("unknown index name", "no such index")

# Attributes redis-py sets on every result Document besides the hash fields.
_DOCUMENT_META = frozenset({"id", "payload"})


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except ResponseError as exc:
        message = str(exc)
        if any(marker in message.lower() for marker in _UNKNOWN_INDEX_MARKERS):
            raise UnknownIndex(message) from exc
        raise CommandRejected(message) from exc
    except RedisError as exc:
        # ConnectionError and TimeoutError land here.
        raise EngineError(str(exc)) from exc


def _to_redis_field(spec: FieldSpec):
    if spec.kind is FieldKind.TEXT:
        return TextField(spec.name, weight=spec.weight, sortable=spec.sortable)
    return NumericField(spec.name, sortable=spec.sortable)


def _to_redis_query(query: SearchQuery) -> Query:
    q = Query(query.raw_query)
    if query.numeric_filter is not None:
        f = query.numeric_filter
        q.add_filter(RedisNumericFilter(f.field, f.min, f.max))
    if query.return_fields:
        q.return_fields(*query.return_fields)
    if query.limit is not None or query.offset is not None:
        limit = query.limit if query.limit is not None else DEFAULT_LIMIT
        q.paging(query.offset or 0, limit)
    return q


class RedisIndexHandle:
    def __init__(self, client: redis.Redis, name: str) -> None:
        self.name = name
        self._ft = client.ft(name)

    def create(self, definition: IndexDefinition) -> None:
        fields = [_to_redis_field(spec) for spec in definition.schema.fields]
        index_definition = RedisIndexDefinition(
            prefix=[definition.key_prefix], index_type=IndexType.HASH
        )
        with _translate_errors():
            self._ft.create_index(fields, definition=index_definition)

    def drop(self) -> None:
        with _translate_errors():
            self._ft.dropindex(delete_documents=False)

    def exists(self) -> bool:
        try:
            with _translate_errors():
                self._ft.info()
        except UnknownIndex:
            return False
        return True

    def search(self, query: SearchQuery) -> SearchResultSet:
        with _translate_errors():
            result = self._ft.search(_to_redis_query(query))
        documents = [
            SearchDocument(
                doc_id=doc.id,
                fields={k: v for k, v in vars(doc).items() if k not in _DOCUMENT_META},
            )
            for doc in result.docs
        ]
        return SearchResultSet(total=result.total, documents=documents)


class RedisSearchEngine:
    """Search engine backed by a Redis server with the search module loaded.

    Every handle gets its own client, closed when the handle is released, so
    no connection outlives a single drop, create or search.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
        socket_timeout: float | None = 5.0,
    ) -> None:
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self.socket_timeout = socket_timeout

    @contextmanager
    def open(self, name: str) -> Iterator[RedisIndexHandle]:
        client = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            socket_timeout=self.socket_timeout,
            decode_responses=True,
        )
        try:
            yield RedisIndexHandle(client, name)
        finally:
            client.close()
            _LOGGER.debug("Closed search client for index %s", name)
