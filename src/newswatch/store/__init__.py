"""Persistence layer: key-value backends and the news repository."""

from newswatch.store.base import KeyValueStore
from newswatch.store.memory import MemoryKeyValueStore
from newswatch.store.news import (
    NewsLoad,
    NewsSource,
    NewsStore,
    is_sample_item,
    load_bundled_news,
    sort_news_desc,
)
from newswatch.store.sqlite import SQLiteKeyValueStore

__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "NewsLoad",
    "NewsSource",
    "NewsStore",
    "SQLiteKeyValueStore",
    "is_sample_item",
    "load_bundled_news",
    "sort_news_desc",
]
