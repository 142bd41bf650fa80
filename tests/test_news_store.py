"""Tests for NewsStore."""

import sqlite3
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from conftest import FIXED_NOW
from newswatch.data import NewsItem
from newswatch.errors import StoreError
from newswatch.store import (
    MemoryKeyValueStore,
    NewsSource,
    NewsStore,
    SQLiteKeyValueStore,
    is_sample_item,
)
from newswatch.store.news import URLS_KEY, load_bundled_news


class FailingKeyValueStore:
    """Backend whose every operation fails."""

    def __getattr__(self, name: str) -> Callable[..., object]:
        def fail(*args: object, **kwargs: object) -> object:
            raise StoreError(f"{name} unavailable")

        return fail


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv: MemoryKeyValueStore) -> NewsStore:
    return NewsStore(kv, clock=lambda: FIXED_NOW, fallback_loader=lambda: [])


class TestLoadNews:
    def test_no_store_uses_bundled_data(self) -> None:
        load = NewsStore(None).load_news()
        assert load.source == NewsSource.FALLBACK_NO_STORE
        assert [item.id for item in load.items] == ["N-001", "N-002", "N-003"]

    def test_empty_store_uses_fallback(self, make_item) -> None:
        fallback = [make_item("N-001", "https://www.example.com/a/1")]
        load = NewsStore(MemoryKeyValueStore(), fallback_loader=lambda: fallback).load_news()
        assert load.source == NewsSource.FALLBACK_EMPTY
        assert load.items == fallback

    def test_store_error_uses_fallback(self) -> None:
        load = NewsStore(FailingKeyValueStore(), fallback_loader=lambda: []).load_news()
        assert load.source == NewsSource.FALLBACK_ERROR
        assert load.items == []

    def test_items_sorted_newest_first(self, store: NewsStore, make_item) -> None:
        store.add_news(
            [
                make_item("N-001", "https://a.jp/news/1", crawled_at="2026-10-01T00:00:00+00:00"),
                make_item("N-002", "https://a.jp/news/2", crawled_at="2026-10-03T00:00:00+00:00"),
                make_item("N-003", "https://a.jp/news/3", crawled_at=None, date="2026-10-02"),
            ]
        )
        load = store.load_news()
        assert load.source == NewsSource.STORE
        assert [item.id for item in load.items] == ["N-002", "N-003", "N-001"]

    def test_corrupt_entries_are_skipped(
        self, kv: MemoryKeyValueStore, store: NewsStore, make_item
    ) -> None:
        good = make_item("N-001", "https://a.jp/news/1").model_dump(mode="json")
        kv.set("news:items", [good, {"id": "N-002", "title": "missing fields"}])
        assert [item.id for item in store.get_all_news()] == ["N-001"]

    def test_bundled_data_is_sample_data(self) -> None:
        assert all(is_sample_item(item) for item in load_bundled_news())


class TestAddNews:
    def test_added_item_appears_once(self, store: NewsStore, make_item) -> None:
        item = make_item("N-001", "https://a.jp/news/1", url_verified=True)
        store.add_news([item])
        store.add_news([item])

        items = store.get_all_news()
        assert len(items) == 1
        assert items[0].url_verified is True
        assert store.is_url_known("https://a.jp/news/1")

    def test_existing_item_wins_on_duplicate_url(self, store: NewsStore, make_item) -> None:
        store.add_news([make_item("N-001", "https://a.jp/news/1", title="first")])
        store.add_news([make_item("N-002", "https://a.jp/news/1", title="second")])

        items = store.get_all_news()
        assert [(i.id, i.title) for i in items] == [("N-001", "first")]

    def test_no_duplicate_urls_within_one_write(self, store: NewsStore, make_item) -> None:
        store.add_news(
            [
                make_item("N-001", "https://a.jp/news/1"),
                make_item("N-002", "https://a.jp/news/1"),
                make_item("N-003", "https://a.jp/news/2"),
            ]
        )
        urls = [item.url for item in store.get_all_news()]
        assert sorted(urls) == ["https://a.jp/news/1", "https://a.jp/news/2"]

    def test_retention_evicts_old_items(self, store: NewsStore, make_item) -> None:
        store.add_news(
            [
                make_item("N-001", "https://a.jp/news/old", date="2026-04-20"),
                make_item("N-002", "https://a.jp/news/edge", date="2026-04-21"),
                make_item("N-003", "https://a.jp/news/new", date="2026-10-17"),
            ]
        )
        ids = {item.id for item in store.get_all_news()}
        assert ids == {"N-002", "N-003"}

    def test_unparseable_date_is_kept(self, store: NewsStore, make_item) -> None:
        store.add_news([make_item("N-001", "https://a.jp/news/1", date="sometime")])
        assert len(store.get_all_news()) == 1

    def test_empty_add_writes_nothing(self) -> None:
        kv = MagicMock(wraps=MemoryKeyValueStore())
        NewsStore(kv).add_news([])
        kv.set.assert_not_called()
        kv.sadd.assert_not_called()

    def test_no_store_is_noop(self, make_item) -> None:
        NewsStore(None).add_news([make_item("N-001", "https://a.jp/news/1")])

    def test_write_failure_is_swallowed(self, make_item) -> None:
        store = NewsStore(FailingKeyValueStore(), clock=lambda: FIXED_NOW)
        store.add_news([make_item("N-001", "https://a.jp/news/1")])


class TestKnownUrls:
    def test_known_urls_are_registered(self, store: NewsStore, make_item) -> None:
        store.add_news([make_item("N-001", "https://a.jp/news/1")])
        assert store.get_known_urls() == {"https://a.jp/news/1"}
        assert not store.is_url_known("https://a.jp/news/2")

    def test_fail_open(self) -> None:
        store = NewsStore(FailingKeyValueStore())
        assert store.get_known_urls() == set()
        assert store.is_url_known("https://a.jp/news/1") is False

    def test_no_store(self) -> None:
        assert NewsStore(None).get_known_urls() == set()


class TestIds:
    def test_sequential_ids(self, store: NewsStore) -> None:
        assert [store.get_next_id() for _ in range(3)] == ["N-001", "N-002", "N-003"]

    def test_ids_past_three_digits(self, kv: MemoryKeyValueStore, store: NewsStore) -> None:
        kv.set("news:counter", 999)
        assert store.get_next_id() == "N-1000"

    @pytest.mark.parametrize("kv_backend", [None, FailingKeyValueStore()])
    def test_fallback_ids_strictly_increase(self, kv_backend: object) -> None:
        store = NewsStore(kv_backend)
        ids = [store.get_next_id() for _ in range(5)]
        numbers = [int(i.removeprefix("N-")) for i in ids]
        assert numbers == sorted(set(numbers))
        assert len(set(ids)) == 5


class TestBookkeeping:
    def test_last_crawled_round_trip(self, store: NewsStore) -> None:
        assert store.get_last_crawled() is None
        store.set_last_crawled("2026-10-18T12:00:00+00:00")
        assert store.get_last_crawled() == "2026-10-18T12:00:00+00:00"

    def test_last_crawled_without_store(self) -> None:
        store = NewsStore(None)
        store.set_last_crawled("2026-10-18T12:00:00+00:00")
        assert store.get_last_crawled() is None

    def test_analysis_cache_expires(self) -> None:
        now = 0.0
        kv = MemoryKeyValueStore(clock=lambda: now)
        store = NewsStore(kv, analysis_ttl_days=30)

        store.set_analysis_cache("N-001", "impact", "Relevant to pricing.")
        assert store.get_analysis_cache("N-001", "impact") == "Relevant to pricing."
        assert store.get_analysis_cache("N-001", "summary") is None

        now = 30 * 24 * 60 * 60
        assert store.get_analysis_cache("N-001", "impact") is None

    def test_analysis_cache_failures_are_ignored(self) -> None:
        store = NewsStore(FailingKeyValueStore())
        store.set_analysis_cache("N-001", "impact", "text")
        assert store.get_analysis_cache("N-001", "impact") is None


class TestRemoval:
    @pytest.fixture
    def populated(self, store: NewsStore, make_item) -> NewsStore:
        items: list[NewsItem] = [
            make_item("N-005", "https://a.jp/news/seed"),
            make_item("N-019", "https://www.example.com/news/x"),
            make_item("N-020", "https://a.jp/news/manual", is_manual=True),
            make_item("N-021", "https://a.jp/news/unverified", url_verified=False),
            make_item("N-022", "https://a.jp/news/real"),
        ]
        store.add_news(items)
        return store

    def test_remove_sample_data(self, populated: NewsStore) -> None:
        assert populated.remove_sample_data() == 3
        assert {item.id for item in populated.get_all_news()} == {"N-021", "N-022"}
        assert not populated.is_url_known("https://a.jp/news/seed")
        assert populated.remove_sample_data() == 0

    def test_remove_unverified(self, populated: NewsStore) -> None:
        assert populated.remove_unverified_news() == 1
        assert not populated.is_url_known("https://a.jp/news/unverified")
        assert populated.is_url_known("https://a.jp/news/real")
        assert populated.remove_unverified_news() == 0

    def test_clear_all(self, kv: MemoryKeyValueStore, populated: NewsStore) -> None:
        assert populated.clear_all_news() == 5
        assert kv.get("news:items") == []
        assert kv.smembers(URLS_KEY) == set()
        assert populated.clear_all_news() == 0

    def test_removals_without_store(self) -> None:
        store = NewsStore(None)
        assert store.remove_sample_data() == 0
        assert store.remove_unverified_news() == 0
        assert store.clear_all_news() == 0

    def test_removal_failure_returns_zero(self) -> None:
        assert NewsStore(FailingKeyValueStore()).remove_sample_data() == 0


@pytest.mark.parametrize(
    "item_id,url,is_manual,expected",
    [
        ("N-001", "https://a.jp/news/1", False, True),
        ("N-018", "https://a.jp/news/1", False, True),
        ("N-019", "https://a.jp/news/1", False, False),
        ("N-1739000000000", "https://a.jp/news/1", False, False),
        ("N-030", "https://example.com/news/1", False, True),
        ("N-030", "https://a.jp/news/1", True, True),
    ],
)
def test_is_sample_item(make_item, item_id: str, url: str, is_manual: bool, expected: bool) -> None:
    assert is_sample_item(make_item(item_id, url, is_manual=is_manual)) is expected


class FlakyCounterStore(MemoryKeyValueStore):
    """Memory backend whose counter fails on selected calls."""

    def __init__(self, failing_calls: set[int]) -> None:
        super().__init__()
        self.failing_calls = failing_calls
        self.calls = 0

    def incr(self, key: str) -> int:
        self.calls += 1
        if self.calls in self.failing_calls:
            raise StoreError("counter unavailable")
        return super().incr(key)


def test_ids_keep_increasing_after_counter_failure() -> None:
    store = NewsStore(FlakyCounterStore(failing_calls={3}))

    ids = [store.get_next_id() for _ in range(5)]

    assert ids[:2] == ["N-001", "N-002"]
    numbers = [int(i.removeprefix("N-")) for i in ids]
    assert all(a < b for a, b in zip(numbers, numbers[1:]))


def test_corrupt_sqlite_value_falls_back(tmp_path) -> None:
    kv = SQLiteKeyValueStore(tmp_path / "kv.db")
    kv.set("news:items", [])
    with sqlite3.connect(tmp_path / "kv.db") as conn:
        conn.execute("UPDATE kv SET value = '{not json' WHERE key = 'news:items'")
    conn.close()

    load = NewsStore(kv, fallback_loader=lambda: []).load_news()

    assert load.source == NewsSource.FALLBACK_ERROR
