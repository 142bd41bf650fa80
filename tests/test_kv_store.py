"""Tests for the key-value backends."""

import sqlite3
from collections.abc import Iterator
from pathlib import Path
from typing import get_type_hints

import pytest

from newswatch.errors import StoreError
from newswatch.store.base import KeyValueStore
from newswatch.store.memory import MemoryKeyValueStore
from newswatch.store.sqlite import SQLiteKeyValueStore


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["memory", "sqlite"])
def kv(request: pytest.FixtureRequest, tmp_path: Path, clock: FakeClock) -> Iterator[object]:
    if request.param == "memory":
        yield MemoryKeyValueStore(clock=clock)
    else:
        yield SQLiteKeyValueStore(tmp_path / "kv.db", clock=clock)


def test_get_missing_returns_none(kv) -> None:
    assert kv.get("nope") is None


def test_set_and_get_json_values(kv) -> None:
    kv.set("items", [{"id": "N-001", "title": "障害福祉"}])
    assert kv.get("items") == [{"id": "N-001", "title": "障害福祉"}]

    kv.set("items", [])
    assert kv.get("items") == []


def test_ttl_expiry(kv, clock: FakeClock) -> None:
    kv.set("cache", "value", ttl_seconds=60)
    clock.now += 59
    assert kv.get("cache") == "value"
    clock.now += 1
    assert kv.get("cache") is None


def test_set_without_ttl_clears_expiry(kv, clock: FakeClock) -> None:
    kv.set("k", 1, ttl_seconds=10)
    kv.set("k", 2)
    clock.now += 100
    assert kv.get("k") == 2


def test_incr_is_sequential(kv) -> None:
    assert [kv.incr("counter") for _ in range(3)] == [1, 2, 3]


def test_set_operations(kv) -> None:
    assert kv.sadd("urls", "a", "b", "a") == 2
    assert kv.sadd("urls", "b", "c") == 1
    assert kv.smembers("urls") == {"a", "b", "c"}
    assert kv.sismember("urls", "a")
    assert kv.srem("urls", "a", "zzz") == 1
    assert not kv.sismember("urls", "a")
    assert kv.sadd("urls") == 0
    assert kv.srem("urls") == 0


def test_delete_removes_values_and_sets(kv) -> None:
    kv.set("k", 1)
    kv.sadd("s", "x")
    kv.delete("k")
    kv.delete("s")
    assert kv.get("k") is None
    assert kv.smembers("s") == set()


def test_memory_store_returns_copies() -> None:
    kv = MemoryKeyValueStore()
    kv.set("items", [{"id": 1}])
    kv.get("items").append({"id": 2})
    assert kv.get("items") == [{"id": 1}]


def test_sqlite_store_is_durable(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "kv.db"
    SQLiteKeyValueStore(path).incr("counter")
    SQLiteKeyValueStore(path).sadd("urls", "https://a.jp/x/1")

    reopened = SQLiteKeyValueStore(path)
    assert reopened.incr("counter") == 2
    assert reopened.smembers("urls") == {"https://a.jp/x/1"}


def test_sqlite_errors_become_store_errors(tmp_path: Path) -> None:
    # A directory cannot be opened as a database file
    kv = SQLiteKeyValueStore(tmp_path)
    with pytest.raises(StoreError):
        kv.get("anything")


@pytest.mark.parametrize("cls", [KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore])
def test_smembers_annotation_is_builtin_set(cls: type) -> None:
    assert get_type_hints(cls.smembers)["return"] == set[str]


def test_sqlite_corrupt_value_becomes_store_error(tmp_path: Path) -> None:
    path = tmp_path / "kv.db"
    kv = SQLiteKeyValueStore(path)
    kv.set("news:items", [])
    kv.set("counter", 1)
    with sqlite3.connect(path) as conn:
        conn.execute("UPDATE kv SET value = '{not json' WHERE key = 'news:items'")
        conn.execute("UPDATE kv SET value = '\"abc\"' WHERE key = 'counter'")
    conn.close()

    with pytest.raises(StoreError):
        kv.get("news:items")
    with pytest.raises(StoreError):
        kv.incr("counter")
