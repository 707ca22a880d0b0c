"""Run built queries against a named index."""

from __future__ import annotations

import logging

from . import SearchQuery, SearchResultSet
from .backend import CommandRejected, EngineError, SearchEngine, UnknownIndex
from .errors import IndexNotFound, MalformedQuery, SearchBackendFailure

_LOGGER = logging.getLogger(__name__)


class SearchExecutor:
    """Sends queries to the engine. Never retries; that is up to the caller."""

    def __init__(self, engine: SearchEngine) -> None:
        self._engine = engine

    def execute(self, index_name: str, query: SearchQuery) -> SearchResultSet:
        """Run query on index_name and return the ranked result set.

        Raises:
            IndexNotFound: the index has not been created.
            MalformedQuery: the engine rejected the query.
            SearchBackendFailure: connection, timeout or protocol failure.
        """
        try:
            with self._engine.open(index_name) as handle:
                results = handle.search(query)
        except UnknownIndex as exc:
            raise IndexNotFound(index_name) from exc
        except CommandRejected as exc:
            raise MalformedQuery(index_name, str(exc)) from exc
        except EngineError as exc:
            raise SearchBackendFailure(index_name, str(exc)) from exc

        _LOGGER.debug(
            "Search %r on %s returned %d of %d",
            query.raw_query,
            index_name,
            len(results.documents),
            results.total,
        )
        return results
