"""Record store on a Redis server, one hash per record."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError

from . import StorageError


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except RedisError as exc:
        raise StorageError(str(exc)) from exc


class RedisRecordStore:
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config) -> RedisRecordStore:
        return cls(
            redis.Redis(
                host=config.redis_host,
                port=config.redis_port,
                db=config.redis_db,
                password=config.redis_password,
                socket_timeout=config.socket_timeout,
                decode_responses=True,
            )
        )

    def put(self, key: str, mapping: dict[str, str]) -> None:
        with _translate_errors():
            self._client.hset(key, mapping=mapping)

    def get(self, key: str) -> dict[str, str] | None:
        with _translate_errors():
            mapping = self._client.hgetall(key)
        return mapping or None

    def scan(self, prefix: str) -> Iterator[tuple[str, dict[str, str]]]:
        with _translate_errors():
            for key in self._client.scan_iter(match=f"{prefix}*", _type="HASH"):
                mapping = self._client.hgetall(key)
                if mapping:
                    yield key, mapping

    def add_member(self, set_key: str, member: str) -> None:
        with _translate_errors():
            self._client.sadd(set_key, member)

    def members(self, set_key: str) -> set[str]:
        with _translate_errors():
            return set(self._client.smembers(set_key))

    def random_member(self, set_key: str) -> str | None:
        with _translate_errors():
            return self._client.srandmember(set_key)

    def close(self) -> None:
        self._client.close()
