"""Entry point shared by scheduled and manual crawl triggers."""

import logging
from datetime import UTC, datetime

from newswatch.config.factory import create_crawler
from newswatch.config.models import NewswatchConfig
from newswatch.data import CrawlResult
from newswatch.errors import ConfigurationError
from newswatch.store.news import NewsStore

logger = logging.getLogger(__name__)


async def run_daily_crawl(
    config: NewswatchConfig,
    *,
    force_all: bool = False,
    store: NewsStore | None = None,
    api_key: str | None = None,
    log_override: bool | None = None,
) -> CrawlResult:
    """Build a crawler from *config* and run it once.

    A missing credential aborts before any work is done and is reported as a
    zero-progress result rather than raised.

    Args:
        config: Root configuration.
        force_all: Run every query group regardless of schedule.
        store: Repository to use instead of one built from config.
        api_key: Anthropic API key; CLAUDE_API_KEY is used when omitted.
        log_override: Override the config's logging.enabled setting.
    """
    try:
        crawler = create_crawler(config, store=store, api_key=api_key, log_override=log_override)
    except ConfigurationError as e:
        logger.error(f"Crawl aborted: {e}")
        return CrawlResult(timestamp=datetime.now(tz=UTC).isoformat(), errors=[str(e)])

    result = await crawler.run(force_all=force_all)
    if result.errors:
        logger.warning(f"Crawl finished with {len(result.errors)} errors: {result.errors}")
    return result
