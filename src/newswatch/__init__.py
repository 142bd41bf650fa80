"""newswatch: grounded news ingestion for a monitored industry."""

from newswatch.classifier import ArticleClassifier, ClaudeArticleClassifier, PageSnippetFetcher
from newswatch.config import NewswatchConfig, create_crawler, create_store, load_config
from newswatch.data import (
    APICallUsage,
    Category,
    CrawlResult,
    Entity,
    GroundingArticle,
    ImpactLevel,
    NewsDraft,
    NewsItem,
    SearchQueryGroup,
    Usage,
)
from newswatch.errors import ConfigurationError, StoreError
from newswatch.pipeline import NewsCrawler, TimeBudget, run_in_batches
from newswatch.resolver import HttpRedirectResolver, Resolution, ResolutionOutcome, UrlResolver
from newswatch.run_logger import RunLogger
from newswatch.runner import run_daily_crawl
from newswatch.schedule import QueryScheduler
from newswatch.search import ClaudeGroundingSearcher, GroundingSearcher
from newswatch.store import (
    KeyValueStore,
    MemoryKeyValueStore,
    NewsStore,
    SQLiteKeyValueStore,
)
from newswatch.url import extract_domain, is_specific_article_url

__all__ = [
    # Models
    "APICallUsage",
    "Category",
    "CrawlResult",
    "Entity",
    "GroundingArticle",
    "ImpactLevel",
    "NewsDraft",
    "NewsItem",
    "SearchQueryGroup",
    "Usage",
    # Errors
    "ConfigurationError",
    "StoreError",
    # Functions
    "extract_domain",
    "is_specific_article_url",
    "run_daily_crawl",
    "run_in_batches",
    # Protocols
    "ArticleClassifier",
    "GroundingSearcher",
    "KeyValueStore",
    "UrlResolver",
    # Stages
    "ClaudeArticleClassifier",
    "ClaudeGroundingSearcher",
    "HttpRedirectResolver",
    "PageSnippetFetcher",
    "QueryScheduler",
    "Resolution",
    "ResolutionOutcome",
    # Pipeline
    "NewsCrawler",
    "TimeBudget",
    # Store
    "MemoryKeyValueStore",
    "NewsStore",
    "SQLiteKeyValueStore",
    # Logging
    "RunLogger",
    # Config
    "NewswatchConfig",
    "create_crawler",
    "create_store",
    "load_config",
]
