"""Search engine protocol."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from . import IndexDefinition, SearchQuery, SearchResultSet

# Page size engines apply when a query sets no limit.
DEFAULT_LIMIT = 10


class EngineError(Exception):
    """Connection, timeout or protocol failure reported by an engine."""


class UnknownIndex(EngineError):
    """The named index does not exist."""


class CommandRejected(EngineError):
    """The engine refused the command itself (bad syntax, bad arguments)."""


@runtime_checkable
class IndexHandle(Protocol):
    """Operations on one named index, valid only inside SearchEngine.open()."""

    name: str

    def create(self, definition: IndexDefinition) -> None:
        """Create the index. Fails if it already exists."""
        ...

    def drop(self) -> None:
        """Drop the index, keeping the underlying records. Raises UnknownIndex if absent."""
        ...

    def exists(self) -> bool:
        ...

    def search(self, query: SearchQuery) -> SearchResultSet:
        """Run a query. Results are sorted by the engine's ranking."""
        ...


@runtime_checkable
class SearchEngine(Protocol):
    """Protocol for search engines."""

    def open(self, name: str) -> AbstractContextManager[IndexHandle]:
        """Acquire a short-lived handle to the named index, released on exit."""
        ...
