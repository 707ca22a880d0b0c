"""Dict-backed record store."""

from __future__ import annotations

import random
import threading
from collections.abc import Iterator


class MemoryRecordStore:
    def __init__(self, rng: random.Random | None = None) -> None:
        self._records: dict[str, dict[str, str]] = {}
        self._sets: dict[str, set[str]] = {}
        self._lock = threading.Lock()
        self._rng = rng or random.Random()

    def put(self, key: str, mapping: dict[str, str]) -> None:
        with self._lock:
            self._records.setdefault(key, {}).update(mapping)

    def get(self, key: str) -> dict[str, str] | None:
        with self._lock:
            record = self._records.get(key)
            return dict(record) if record is not None else None

    def scan(self, prefix: str) -> Iterator[tuple[str, dict[str, str]]]:
        with self._lock:
            snapshot = [(k, dict(v)) for k, v in self._records.items() if k.startswith(prefix)]
        yield from snapshot

    def add_member(self, set_key: str, member: str) -> None:
        with self._lock:
            self._sets.setdefault(set_key, set()).add(member)

    def members(self, set_key: str) -> set[str]:
        with self._lock:
            return set(self._sets.get(set_key, ()))

    def random_member(self, set_key: str) -> str | None:
        members = sorted(self.members(set_key))
        if not members:
            return None
        return self._rng.choice(members)

    def close(self) -> None:
        pass
