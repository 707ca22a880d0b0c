"""Index lifecycle: drop-then-create and existence checks."""

from __future__ import annotations

import logging
import threading

from . import IndexDefinition
from .backend import EngineError, SearchEngine, UnknownIndex
from .errors import IndexBackendFailure

_LOGGER = logging.getLogger(__name__)


class IndexManager:
    """Owns the lifecycle of named indexes on one search engine.

    ensure_index calls for the same index name are serialized within the
    process. Coordinating several writer processes is left to the deployment
    (one process owns index lifecycle at startup).
    """

    def __init__(self, engine: SearchEngine) -> None:
        self._engine = engine
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(name, threading.Lock())

    def ensure_index(self, definition: IndexDefinition) -> None:
        """Drop any index named definition.name, then create it from definition.schema.

        No schema diffing: the index is always rebuilt, so a restart always
        ends with exactly the configured schema. If the process dies between
        drop and create the index is left absent; run this again on startup
        instead of trusting any cached state.

        Raises:
            IndexBackendFailure: drop (other than "index does not exist") or
                create failed.
        """
        name = definition.name
        with self._lock_for(name):
            with self._engine.open(name) as handle:
                try:
                    handle.drop()
                    _LOGGER.info("Dropped index %s", name)
                except UnknownIndex:
                    _LOGGER.info("Index %s did not exist, nothing to drop", name)
                except EngineError as exc:
                    raise IndexBackendFailure(name, "drop", exc) from exc

                try:
                    handle.create(definition)
                except EngineError as exc:
                    raise IndexBackendFailure(name, "create", exc) from exc
        _LOGGER.info(
            "Created index %s over prefix %r with fields %s",
            name,
            definition.key_prefix,
            ", ".join(definition.schema.field_names),
        )

    def index_exists(self, name: str) -> bool:
        """Return True if the index exists. A missing index is not an error."""
        with self._engine.open(name) as handle:
            try:
                return handle.exists()
            except EngineError as exc:
                raise IndexBackendFailure(name, "inspect", exc) from exc
