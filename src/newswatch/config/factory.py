"""Factory functions to create components from configuration."""

from pathlib import Path

from newswatch.classifier.claude import ClaudeArticleClassifier
from newswatch.classifier.snippet import PageSnippetFetcher
from newswatch.config.models import ClassifierConfig, NewswatchConfig, StoreConfig
from newswatch.pipeline.crawl import NewsCrawler
from newswatch.resolver.redirect import HttpRedirectResolver
from newswatch.run_logger import RunLogger
from newswatch.schedule import QueryScheduler
from newswatch.search.claude import ClaudeGroundingSearcher
from newswatch.store.base import KeyValueStore
from newswatch.store.memory import MemoryKeyValueStore
from newswatch.store.news import NewsStore
from newswatch.store.sqlite import SQLiteKeyValueStore


def create_scheduler(config: NewswatchConfig) -> QueryScheduler:
    return QueryScheduler([g.to_group() for g in config.query_groups])


def create_kv_store(config: StoreConfig) -> KeyValueStore | None:
    """Create the key-value backend from config.

    Uses explicit matching on the backend name.
    """
    if config.backend == "sqlite":
        return SQLiteKeyValueStore(config.path)
    if config.backend == "memory":
        return MemoryKeyValueStore()
    if config.backend == "none":
        return None
    msg = f"Unknown store backend: {config.backend}"
    raise ValueError(msg)


def create_store(config: StoreConfig) -> NewsStore:
    return NewsStore(
        create_kv_store(config),
        retention_days=config.retention_days,
        analysis_ttl_days=config.analysis_ttl_days,
    )


def create_searcher(config: NewswatchConfig, api_key: str | None = None) -> ClaudeGroundingSearcher:
    return ClaudeGroundingSearcher(
        api_key=api_key,
        model=config.search.model,
        max_searches_per_query=config.search.max_searches_per_query,
        domain=config.domain.description,
        language=config.domain.language,
        recency_days=config.search.recency_days,
        wrapper_hosts=config.resolver.wrapper_hosts,
    )


def create_resolver(config: NewswatchConfig) -> HttpRedirectResolver:
    return HttpRedirectResolver(
        batch_size=config.resolver.batch_size,
        timeout=config.resolver.timeout_seconds,
        wrapper_hosts=config.resolver.wrapper_hosts,
    )


def create_snippet_fetcher(config: ClassifierConfig) -> PageSnippetFetcher | None:
    if not config.fetch_snippets:
        return None
    return PageSnippetFetcher(
        max_chars=config.snippet_chars,
        timeout=config.snippet_timeout_seconds,
        user_agent=config.user_agent,
    )


def create_classifier(
    config: NewswatchConfig, api_key: str | None = None
) -> ClaudeArticleClassifier:
    return ClaudeArticleClassifier(
        [e.to_entity() for e in config.entities],
        api_key=api_key,
        model=config.classifier.model,
        domain=config.domain.description,
        language=config.domain.language,
        snippet_fetcher=create_snippet_fetcher(config.classifier),
    )


def create_crawler(
    config: NewswatchConfig,
    *,
    store: NewsStore | None = None,
    api_key: str | None = None,
    log_override: bool | None = None,
) -> NewsCrawler:
    """Create a complete crawler from root config.

    Args:
        config: Root configuration.
        store: Repository to use instead of one built from ``config.store``.
        api_key: Anthropic API key; CLAUDE_API_KEY is used when omitted.
        log_override: Override the config's logging.enabled setting.

    Raises:
        ConfigurationError: If no API key is available.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=Path(config.logging.log_dir), enabled=True)

    return NewsCrawler(
        scheduler=create_scheduler(config),
        searcher=create_searcher(config, api_key),
        resolver=create_resolver(config),
        classifier=create_classifier(config, api_key),
        store=store if store is not None else create_store(config.store),
        concurrency=config.governor.concurrency,
        batch_size=config.classifier.batch_size,
        time_limit_seconds=config.governor.time_limit_seconds,
        wrapper_hosts=config.resolver.wrapper_hosts,
        run_logger=run_logger,
    )
