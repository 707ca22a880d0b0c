"""Tests for SearchExecutor."""

from unittest.mock import MagicMock

import pytest

from article_search.search import SearchDocument, SearchQuery, SearchResultSet
from article_search.search.backend import CommandRejected, EngineError, UnknownIndex
from article_search.search.errors import (
    IndexNotFound,
    MalformedQuery,
    SearchBackendFailure,
    SearchError,
)
from article_search.search.executor import SearchExecutor
from article_search.search.manager import IndexManager
from article_search.search.memory import MemorySearchEngine
from article_search.search.schema import article_index
from article_search.storage.memory import MemoryRecordStore


def _engine_with_index():
    store = MemoryRecordStore()
    store.put("Article:1", {"title": "How to cook Ramen with otter", "price": "12.50"})
    engine = MemorySearchEngine(store)
    IndexManager(engine).ensure_index(article_index())
    return engine


def _mock_engine(handle):
    engine = MagicMock()
    engine.open.return_value.__enter__.return_value = handle
    engine.open.return_value.__exit__.return_value = False
    return engine


class TestExecute:
    def test_returns_results(self):
        executor = SearchExecutor(_engine_with_index())
        results = executor.execute("article-idx", SearchQuery(raw_query="ramen"))
        assert results.total == 1
        assert results.documents[0].doc_id == "Article:1"

    def test_passes_query_to_handle(self):
        handle = MagicMock()
        expected = SearchResultSet(total=1, documents=[SearchDocument("Article:1", {"title": "x"})])
        handle.search.return_value = expected
        engine = _mock_engine(handle)

        query = SearchQuery(raw_query="x")
        assert SearchExecutor(engine).execute("article-idx", query) is expected
        engine.open.assert_called_once_with("article-idx")
        handle.search.assert_called_once_with(query)

    def test_missing_index(self):
        engine = MemorySearchEngine(MemoryRecordStore())
        with pytest.raises(IndexNotFound) as exc_info:
            SearchExecutor(engine).execute("missing-idx", SearchQuery(raw_query="x"))
        assert not isinstance(exc_info.value, SearchBackendFailure)
        assert exc_info.value.kind == "index_not_found"
        assert exc_info.value.index_name == "missing-idx"

    def test_rejected_query(self):
        executor = SearchExecutor(_engine_with_index())
        with pytest.raises(MalformedQuery):
            executor.execute("article-idx", SearchQuery(raw_query="(ramen"))

    def test_backend_failure(self):
        handle = MagicMock()
        handle.search.side_effect = EngineError("Connection refused")
        with pytest.raises(SearchBackendFailure) as exc_info:
            SearchExecutor(_mock_engine(handle)).execute("article-idx", SearchQuery(raw_query="x"))
        assert exc_info.value.kind == "backend_failure"
        assert isinstance(exc_info.value.__cause__, EngineError)

    @pytest.mark.parametrize(
        "error, expected",
        [
            (UnknownIndex("Unknown Index name"), IndexNotFound),
            (CommandRejected("Syntax error"), MalformedQuery),
            (EngineError("Timeout"), SearchBackendFailure),
        ],
    )
    def test_error_mapping(self, error, expected):
        handle = MagicMock()
        handle.search.side_effect = error
        with pytest.raises(expected) as exc_info:
            SearchExecutor(_mock_engine(handle)).execute("article-idx", SearchQuery(raw_query="x"))
        assert isinstance(exc_info.value, SearchError)


class TestHandleRelease:
    def test_released_after_success(self):
        engine = _engine_with_index()
        SearchExecutor(engine).execute("article-idx", SearchQuery(raw_query="ramen"))
        assert engine.open_handles == 0

    def test_released_after_query_error(self):
        engine = _engine_with_index()
        with pytest.raises(MalformedQuery):
            SearchExecutor(engine).execute("article-idx", SearchQuery(raw_query='"ramen'))
        assert engine.open_handles == 0

    def test_released_after_missing_index(self):
        engine = MemorySearchEngine(MemoryRecordStore())
        with pytest.raises(IndexNotFound):
            SearchExecutor(engine).execute("missing-idx", SearchQuery(raw_query="x"))
        assert engine.open_handles == 0

    def test_exit_called_on_backend_failure(self):
        handle = MagicMock()
        handle.search.side_effect = EngineError("Connection reset by peer")
        engine = _mock_engine(handle)
        with pytest.raises(SearchBackendFailure):
            SearchExecutor(engine).execute("article-idx", SearchQuery(raw_query="x"))
        assert engine.open.return_value.__exit__.called
