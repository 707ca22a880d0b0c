"""Tests for record stores and repositories."""

import random
from unittest.mock import MagicMock, patch

import pytest
import redis

from article_search.config import Config
from article_search.search.schema import ARTICLE_KEY_PREFIX
from article_search.storage import (
    Article,
    ArticleRepository,
    Author,
    AuthorRepository,
    RecordStore,
    StorageError,
    get_store,
)
from article_search.storage.memory import MemoryRecordStore
from article_search.storage.redis_store import RedisRecordStore


class TestMemoryRecordStore:
    def test_put_and_get(self):
        store = MemoryRecordStore()
        store.put("Article:1", {"title": "Alpha"})
        assert store.get("Article:1") == {"title": "Alpha"}
        assert store.get("Article:2") is None

    def test_put_merges_fields(self):
        store = MemoryRecordStore()
        store.put("Article:1", {"title": "Alpha"})
        store.put("Article:1", {"price": "9.99"})
        assert store.get("Article:1") == {"title": "Alpha", "price": "9.99"}

    def test_scan_by_prefix(self):
        store = MemoryRecordStore()
        store.put("Article:1", {"title": "Alpha"})
        store.put("Author:1", {"name": "Ada"})
        assert [key for key, _ in store.scan("Article:")] == ["Article:1"]

    def test_sets(self):
        store = MemoryRecordStore(rng=random.Random(1))
        assert store.random_member("Author") is None
        store.add_member("Author", "a")
        store.add_member("Author", "b")
        store.add_member("Author", "a")
        assert store.members("Author") == {"a", "b"}
        assert store.random_member("Author") in {"a", "b"}

    def test_satisfies_protocol(self):
        assert isinstance(MemoryRecordStore(), RecordStore)


class TestRedisRecordStore:
    def test_put(self):
        client = MagicMock()
        RedisRecordStore(client).put("Article:1", {"title": "Alpha"})
        client.hset.assert_called_once_with("Article:1", mapping={"title": "Alpha"})

    def test_get_missing(self):
        client = MagicMock()
        client.hgetall.return_value = {}
        assert RedisRecordStore(client).get("Article:404") is None

    def test_scan(self):
        client = MagicMock()
        client.scan_iter.return_value = iter(["Article:1", "Article:2"])
        client.hgetall.side_effect = [{"title": "Alpha"}, {}]
        assert list(RedisRecordStore(client).scan("Article:")) == [("Article:1", {"title": "Alpha"})]
        client.scan_iter.assert_called_once_with(match="Article:*", _type="HASH")

    def test_sets(self):
        client = MagicMock()
        client.smembers.return_value = {"a", "b"}
        client.srandmember.return_value = "b"
        store = RedisRecordStore(client)
        store.add_member("Author", "a")
        client.sadd.assert_called_once_with("Author", "a")
        assert store.members("Author") == {"a", "b"}
        assert store.random_member("Author") == "b"

    def test_from_config(self):
        config = Config(backend="redis", redis_host="db", redis_port=6390, redis_db=1, redis_password=None)
        with patch("article_search.storage.redis_store.redis.Redis") as mock_redis_class:
            RedisRecordStore.from_config(config)
        kwargs = mock_redis_class.call_args.kwargs
        assert kwargs["host"] == "db"
        assert kwargs["port"] == 6390
        assert kwargs["decode_responses"] is True

    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("put", ("Article:1", {"title": "Alpha"})),
            ("get", ("Article:1",)),
            ("add_member", ("Author", "a")),
            ("members", ("Author",)),
            ("random_member", ("Author",)),
        ],
    )
    def test_connection_error_becomes_storage_error(self, method, args):
        client = MagicMock()
        for name in ("hset", "hgetall", "sadd", "smembers", "srandmember"):
            getattr(client, name).side_effect = redis.exceptions.ConnectionError("Connection refused")
        with pytest.raises(StorageError, match="Connection refused") as exc_info:
            getattr(RedisRecordStore(client), method)(*args)
        assert exc_info.value.kind == "backend_failure"
        assert isinstance(exc_info.value.__cause__, redis.exceptions.ConnectionError)

    def test_scan_error_becomes_storage_error(self):
        client = MagicMock()
        client.scan_iter.side_effect = redis.exceptions.TimeoutError("Timeout reading from socket")
        with pytest.raises(StorageError):
            list(RedisRecordStore(client).scan("Article:"))

    def test_close(self):
        client = MagicMock()
        RedisRecordStore(client).close()
        client.close.assert_called_once_with()


class TestRepositories:
    def test_article_keys_match_index_prefix(self):
        assert ArticleRepository.key_for("x").startswith(ARTICLE_KEY_PREFIX)

    def test_save_assigns_id(self):
        store = MemoryRecordStore()
        author = AuthorRepository(store).save(Author(id=None, name="Ada Fischer"))
        assert author.id
        assert store.get(f"Author:{author.id}") == {"name": "Ada Fischer"}
        assert store.members("Author") == {author.id}

    def test_article_round_trip(self):
        store = MemoryRecordStore()
        repo = ArticleRepository(store)
        article = repo.save(Article(id=None, title="Alpha", price=9.99, authors={"a1", "a2"}))

        raw = store.get(f"Article:{article.id}")
        assert raw == {"title": "Alpha", "price": "9.99", "authors": "Author:a1,Author:a2"}
        assert repo.find(article.id) == article

    def test_article_without_authors(self):
        repo = ArticleRepository(MemoryRecordStore())
        article = repo.save(Article(id="1", title="Alpha", price=9.99))
        assert repo.find("1").authors == set()
        assert article.id == "1"

    def test_find_all_and_count(self):
        repo = ArticleRepository(MemoryRecordStore())
        assert repo.count() == 0
        repo.save(Article(id="b", title="Beta", price=2.0))
        repo.save(Article(id="a", title="Alpha", price=1.0))
        assert repo.count() == 2
        assert [a.title for a in repo.find_all()] == ["Alpha", "Beta"]

    def test_find_missing(self):
        assert ArticleRepository(MemoryRecordStore()).find("nope") is None

    def test_random_id(self):
        repo = AuthorRepository(MemoryRecordStore())
        assert repo.random_id() is None
        author = repo.save(Author(id=None, name="Ada"))
        assert repo.random_id() == author.id


class TestGetStore:
    def test_memory(self):
        assert isinstance(get_store(Config(backend="memory")), MemoryRecordStore)

    def test_redis(self):
        with patch("article_search.storage.redis_store.redis.Redis"):
            assert isinstance(get_store(Config(backend="redis")), RedisRecordStore)

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            get_store(Config(backend="cassandra"))
