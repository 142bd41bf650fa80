"""Persistent news repository.

Wraps a ``KeyValueStore`` with the news-specific operations used by the
crawler and by administrative triggers. An absent or failing backend never
raises out of this module: reads degrade to the bundled dataset (or an empty
set) and writes become logged no-ops.

Keys
────
news:items          list of NewsItem dicts
news:urls           set of every accepted url
news:counter        integer id counter
news:lastCrawled    ISO-8601 timestamp of the last crawl
news:analysis:<mode>:<id>   cached analysis text (TTL)
"""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from importlib import resources
from typing import Any

from pydantic import ValidationError

from newswatch.data import NewsItem
from newswatch.errors import StoreError
from newswatch.store.base import KeyValueStore

logger = logging.getLogger(__name__)

NEWS_KEY = "news:items"
URLS_KEY = "news:urls"
COUNTER_KEY = "news:counter"
LAST_CRAWLED_KEY = "news:lastCrawled"
ANALYSIS_KEY_PREFIX = "news:analysis"

DEFAULT_RETENTION_DAYS = 180
DEFAULT_ANALYSIS_TTL_DAYS = 30

# Ids N-001 .. N-018 belong to the hand-written seed dataset
SEED_ID_RANGE = (1, 18)
SAMPLE_URL_MARKER = "example.com"

_ID_PATTERN = re.compile(r"^N-(\d+)$")


class NewsSource(StrEnum):
    """Where the items returned by ``load_news`` came from."""

    STORE = "store"
    FALLBACK_NO_STORE = "fallback_no_store"
    FALLBACK_EMPTY = "fallback_empty"
    FALLBACK_ERROR = "fallback_error"


@dataclass(frozen=True)
class NewsLoad:
    items: list[NewsItem]
    source: NewsSource


def load_bundled_news() -> list[NewsItem]:
    """Load the static dataset shipped with the package."""
    raw = resources.files("newswatch.store").joinpath("fallback_news.json").read_text("utf-8")
    return parse_items(json.loads(raw))


def parse_items(raw: Any) -> list[NewsItem]:
    """Validate stored item dicts, skipping any that are corrupt."""
    if not isinstance(raw, list):
        return []
    items: list[NewsItem] = []
    for entry in raw:
        try:
            items.append(NewsItem.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping corrupt news item: %s", exc.error_count())
    return items


def sort_news_desc(items: Iterable[NewsItem]) -> list[NewsItem]:
    """Newest first, by crawl time falling back to publish date."""
    return sorted(items, key=lambda item: item.sort_key(), reverse=True)


def is_sample_item(item: NewsItem) -> bool:
    """Whether *item* is synthetic seed or manually entered data."""
    if SAMPLE_URL_MARKER in item.url or item.is_manual:
        return True
    match = _ID_PATTERN.match(item.id)
    if match is None:
        return False
    low, high = SEED_ID_RANGE
    return low <= int(match.group(1)) <= high


class NewsStore:
    """Repository for news items, known URLs and crawl bookkeeping.

    Args:
        kv: Key-value backend, or None when no durable store is configured.
        retention_days: Items published longer ago are evicted on write.
        analysis_ttl_days: Lifetime of cached analysis entries.
        fallback_loader: Supplies items when the store is absent or empty.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        kv: KeyValueStore | None,
        *,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        analysis_ttl_days: int = DEFAULT_ANALYSIS_TTL_DAYS,
        fallback_loader: Callable[[], list[NewsItem]] = load_bundled_news,
        clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
    ) -> None:
        self._kv = kv
        self._retention = timedelta(days=retention_days)
        self._analysis_ttl_seconds = analysis_ttl_days * 24 * 60 * 60
        self._fallback_loader = fallback_loader
        self._clock = clock
        self._last_fallback_id = 0

    @property
    def configured(self) -> bool:
        return self._kv is not None

    # ── Items ────────────────────────────────────────────────────────────

    @staticmethod
    def _read_items(kv: KeyValueStore) -> list[NewsItem]:
        return parse_items(kv.get(NEWS_KEY) or [])

    @staticmethod
    def _write_items(kv: KeyValueStore, items: list[NewsItem]) -> None:
        kv.set(NEWS_KEY, [item.model_dump(mode="json") for item in items])

    def load_news(self) -> NewsLoad:
        """Return all items together with the branch that produced them."""
        if self._kv is None:
            return NewsLoad(sort_news_desc(self._fallback_loader()), NewsSource.FALLBACK_NO_STORE)
        try:
            items = self._read_items(self._kv)
        except StoreError as e:
            logger.error("Failed to read news from store: %s", e)
            return NewsLoad(sort_news_desc(self._fallback_loader()), NewsSource.FALLBACK_ERROR)
        if not items:
            return NewsLoad(sort_news_desc(self._fallback_loader()), NewsSource.FALLBACK_EMPTY)
        return NewsLoad(sort_news_desc(items), NewsSource.STORE)

    def get_all_news(self) -> list[NewsItem]:
        """Return all items, newest first."""
        return self.load_news().items

    def add_news(self, new_items: list[NewsItem]) -> None:
        """Merge *new_items* into the store and register their URLs.

        Items older than the retention window are evicted in the same write.
        An item whose URL is already stored is ignored.
        """
        if not new_items:
            return
        if self._kv is None:
            logger.info("No store configured; dropping %d new items", len(new_items))
            return

        cutoff = (self._clock() - self._retention).date()
        try:
            existing = self._read_items(self._kv)
            seen: set[str] = set()
            merged: list[NewsItem] = []
            for item in [*existing, *new_items]:
                if item.url in seen:
                    continue
                published = item.published_on()
                if published is not None and published < cutoff:
                    continue
                seen.add(item.url)
                merged.append(item)

            self._write_items(self._kv, merged)
            self._kv.sadd(URLS_KEY, *(item.url for item in new_items))
        except StoreError as e:
            logger.error("Failed to persist %d news items: %s", len(new_items), e)
            return

        evicted = len(existing) + len(new_items) - len(merged)
        logger.info("Stored %d items (%d dropped or evicted)", len(merged), evicted)

    # ── Known URLs ───────────────────────────────────────────────────────

    def get_known_urls(self) -> set[str]:
        """Return every URL ever accepted; empty if the store is unavailable."""
        if self._kv is None:
            return set()
        try:
            return self._kv.smembers(URLS_KEY)
        except StoreError as e:
            logger.warning("Failed to read known URLs, continuing without: %s", e)
            return set()

    def is_url_known(self, url: str) -> bool:
        if self._kv is None:
            return False
        try:
            return self._kv.sismember(URLS_KEY, url)
        except StoreError:
            return False

    # ── Ids and bookkeeping ──────────────────────────────────────────────

    def _timestamp_id(self) -> str:
        value = max(int(time.time() * 1000), self._last_fallback_id + 1)
        self._last_fallback_id = value
        return f"N-{value}"

    def get_next_id(self) -> str:
        """Return the next sequential id, e.g. ``N-019``.

        Once the counter has failed, this store keeps issuing ``N-<epoch ms>``
        ids so that ids handed out by one instance never go backwards.
        """
        if self._kv is None or self._last_fallback_id:
            return self._timestamp_id()
        try:
            count = self._kv.incr(COUNTER_KEY)
        except StoreError as e:
            logger.error("Failed to increment id counter: %s", e)
            return self._timestamp_id()
        return f"N-{count:03d}"

    def set_last_crawled(self, timestamp: str) -> None:
        if self._kv is None:
            return
        try:
            self._kv.set(LAST_CRAWLED_KEY, timestamp)
        except StoreError as e:
            logger.error("Failed to record last crawl time: %s", e)

    def get_last_crawled(self) -> str | None:
        if self._kv is None:
            return None
        try:
            value = self._kv.get(LAST_CRAWLED_KEY)
        except StoreError as e:
            logger.error("Failed to read last crawl time: %s", e)
            return None
        return value if isinstance(value, str) else None

    # ── Analysis cache ───────────────────────────────────────────────────

    @staticmethod
    def _analysis_key(news_id: str, mode: str) -> str:
        return f"{ANALYSIS_KEY_PREFIX}:{mode}:{news_id}"

    def get_analysis_cache(self, news_id: str, mode: str) -> str | None:
        if self._kv is None:
            return None
        try:
            value = self._kv.get(self._analysis_key(news_id, mode))
        except StoreError:
            return None
        return value if isinstance(value, str) else None

    def set_analysis_cache(self, news_id: str, mode: str, analysis: str) -> None:
        if self._kv is None:
            return
        try:
            self._kv.set(
                self._analysis_key(news_id, mode), analysis, ttl_seconds=self._analysis_ttl_seconds
            )
        except StoreError as e:
            logger.debug("Ignoring analysis cache write failure: %s", e)

    # ── Administrative bulk deletes ──────────────────────────────────────

    def _remove_where(self, predicate: Callable[[NewsItem], bool], label: str) -> int:
        if self._kv is None:
            return 0
        try:
            existing = self._read_items(self._kv)
            removed = [item for item in existing if predicate(item)]
            if not removed:
                return 0
            self._write_items(self._kv, [item for item in existing if not predicate(item)])
            self._kv.srem(URLS_KEY, *(item.url for item in removed))
        except StoreError as e:
            logger.error("Failed to remove %s news: %s", label, e)
            return 0
        logger.info("Removed %d %s news items", len(removed), label)
        return len(removed)

    def remove_unverified_news(self) -> int:
        """Delete items whose URL was never verified; return the count."""
        return self._remove_where(lambda item: not item.url_verified, "unverified")

    def remove_sample_data(self) -> int:
        """Delete seed, example and manually entered items; return the count."""
        return self._remove_where(is_sample_item, "sample")

    def clear_all_news(self) -> int:
        """Delete every item and the known-URL set; return the item count."""
        if self._kv is None:
            return 0
        try:
            count = len(self._read_items(self._kv))
            self._write_items(self._kv, [])
            self._kv.delete(URLS_KEY)
        except StoreError as e:
            logger.error("Failed to clear news: %s", e)
            return 0
        logger.info("Cleared %d news items", count)
        return count
