"""Daily crawl coordinator."""

import logging
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from newswatch.classifier.base import ArticleClassifier
from newswatch.data import CrawlResult, GroundingArticle, NewsDraft, NewsItem, Usage
from newswatch.pipeline.batching import run_in_batches
from newswatch.pipeline.budget import DEFAULT_TIME_LIMIT_SECONDS, TimeBudget
from newswatch.resolver.base import UrlResolver
from newswatch.run_logger import RunLogger
from newswatch.schedule import QueryScheduler
from newswatch.search.base import GroundingSearcher
from newswatch.store.news import NewsStore
from newswatch.url import is_specific_article_url, is_wrapper_url

logger = logging.getLogger(__name__)


class NewsCrawler:
    """Scheduler -> search -> resolution -> classification -> persistence.

    Flow:
    1. Queries selected by the scheduler are searched in parallel groups
    2. Candidate URLs are canonicalised and filtered again
    3. Candidates are classified in batches, in parallel groups
    4. Accepted items get ids and are persisted in one write

    URL uniqueness is checked after search, after resolution and before
    persisting, against both the durable known-URL set and the URLs seen
    during this run. The time budget is checked between stages and before
    each group of classification batches; when it runs out, whatever has
    been produced is still persisted.

    Args:
        scheduler: Selects the query groups to run.
        searcher: Grounded search backend.
        resolver: Canonicalises candidate URLs.
        classifier: Classifies batches of candidates.
        store: Persistent news repository.
        concurrency: Units run in parallel per group (search and classification).
        batch_size: Candidates per classification call.
        time_limit_seconds: Wall-clock budget for the whole run.
        wrapper_hosts: Redirect hosts; URLs still on them after resolution are dropped.
        run_logger: Optional RunLogger for stage records.
        clock: Monotonic clock used by the time budget.
    """

    def __init__(
        self,
        scheduler: QueryScheduler,
        searcher: GroundingSearcher,
        resolver: UrlResolver,
        classifier: ArticleClassifier,
        store: NewsStore,
        *,
        concurrency: int = 3,
        batch_size: int = 10,
        time_limit_seconds: float = DEFAULT_TIME_LIMIT_SECONDS,
        wrapper_hosts: Iterable[str] = (),
        run_logger: RunLogger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._scheduler = scheduler
        self._searcher = searcher
        self._resolver = resolver
        self._classifier = classifier
        self._store = store
        self._concurrency = concurrency
        self._batch_size = batch_size
        self._time_limit = time_limit_seconds
        self._wrapper_hosts = tuple(wrapper_hosts)
        self._run_logger = run_logger
        self._clock = clock

    async def run(self, *, force_all: bool = False) -> CrawlResult:
        """Execute one crawl.

        Args:
            force_all: Run every query group regardless of schedule.

        Returns:
            Counters and accumulated errors. Never raises for per-unit,
            timeout or store failures.
        """
        budget = TimeBudget(self._time_limit, clock=self._clock)
        result = CrawlResult(timestamp=datetime.now(tz=UTC).isoformat())
        if self._run_logger:
            self._run_logger.start_run("manual" if force_all else "scheduled")

        known_urls = set(self._store.get_known_urls())
        groups = (
            self._scheduler.get_all_queries() if force_all else self._scheduler.get_todays_queries()
        )
        queries = [q for g in groups for q in g.queries]

        # Step 1: grounded search
        logger.info(f"[Crawl] Step 1: {len(queries)} queries, {self._concurrency} at a time")
        t0 = self._clock()
        calls = len(result.usage.api_calls)
        candidates = await self._search(queries, known_urls, result)
        self._log_stage(
            "search", self._searcher, len(queries), len(candidates), t0, result.usage, calls
        )
        logger.info(
            f"[Crawl] Step 1 done ({budget.elapsed():.0f}s): "
            f"{result.grounding_urls_found} -> {len(candidates)} candidates"
        )

        if budget.exceeded():
            result.errors.append("timeout: time limit reached after search")
            return self._finish(result, [])

        # Step 2: URL resolution
        t0 = self._clock()
        resolved = await self._resolver.resolve_all(candidates)
        final = self._filter_resolved(resolved, known_urls, result)
        result.article_urls_filtered = len(final)
        self._log_stage("resolution", self._resolver, len(candidates), len(final), t0)
        logger.info(
            f"[Crawl] Step 2 done ({budget.elapsed():.0f}s): "
            f"{len(resolved)} -> {len(final)} article URLs"
        )

        if budget.exceeded():
            result.errors.append("timeout: time limit reached after URL resolution")
            return self._finish(result, [])

        # Step 3: classification
        t0 = self._clock()
        calls = len(result.usage.api_calls)
        items = await self._classify(final, known_urls, budget, result)
        self._log_stage(
            "classification", self._classifier, len(final), len(items), t0, result.usage, calls
        )

        return self._finish(result, items)

    async def _search(
        self,
        queries: list[str],
        known_urls: set[str],
        result: CrawlResult,
    ) -> list[GroundingArticle]:
        outcome = await run_in_batches(
            queries,
            self._concurrency,
            lambda query: self._searcher.search(query, known_urls),
        )
        result.errors.extend(f"search error: {e}" for e in outcome.errors)

        seen: set[str] = set()
        candidates: list[GroundingArticle] = []
        for articles, usage in outcome.results:
            result.queries_executed += 1
            result.grounding_urls_found += len(articles)
            result.usage += usage
            for article in articles:
                if article.uri in known_urls or article.uri in seen:
                    result.duplicates_skipped += 1
                    continue
                seen.add(article.uri)
                candidates.append(article)
        return candidates

    def _filter_resolved(
        self,
        resolved: list[GroundingArticle],
        known_urls: set[str],
        result: CrawlResult,
    ) -> list[GroundingArticle]:
        """Re-apply page and duplicate filters to canonical URLs."""
        seen: set[str] = set()
        final: list[GroundingArticle] = []
        for article in resolved:
            if self._wrapper_hosts and is_wrapper_url(article.uri, self._wrapper_hosts):
                continue
            if not is_specific_article_url(article.uri):
                continue
            if article.uri in known_urls or article.uri in seen:
                result.duplicates_skipped += 1
                continue
            seen.add(article.uri)
            final.append(article)
        return final

    async def _classify(
        self,
        articles: list[GroundingArticle],
        known_urls: set[str],
        budget: TimeBudget,
        result: CrawlResult,
    ) -> list[NewsItem]:
        batches = [
            articles[i : i + self._batch_size] for i in range(0, len(articles), self._batch_size)
        ]
        logger.info(
            f"[Crawl] Step 3: {len(batches)} batches, {self._concurrency} at a time"
        )

        outcome = await run_in_batches(
            batches,
            self._concurrency,
            self._classifier.classify,
            should_stop=budget.exceeded,
        )
        result.errors.extend(f"classification error: {e}" for e in outcome.errors)
        if outcome.stopped_early:
            result.errors.append(
                "timeout: time limit reached during classification; collected items saved"
            )

        items: list[NewsItem] = []
        for drafts, usage in outcome.results:
            result.usage += usage
            items.extend(self._accept(drafts, known_urls, result))
        return items

    def _accept(
        self,
        drafts: list[NewsDraft],
        known_urls: set[str],
        result: CrawlResult,
    ) -> list[NewsItem]:
        accepted: list[NewsItem] = []
        for draft in drafts:
            if draft.url in known_urls:
                result.duplicates_skipped += 1
                continue
            known_urls.add(draft.url)
            accepted.append(draft.with_id(self._store.get_next_id()))
        return accepted

    def _finish(self, result: CrawlResult, items: list[NewsItem]) -> CrawlResult:
        self._store.add_news(items)
        self._store.set_last_crawled(result.timestamp)
        result.new_articles = len(items)

        logger.info(f"[Crawl] Finished: {len(items)} items saved, {len(result.errors)} errors")
        if self._run_logger:
            self._run_logger.finish_run(result)
        return result

    def _log_stage(
        self,
        stage: str,
        component: object,
        input_count: int,
        output_count: int,
        started: float,
        usage: Usage | None = None,
        calls_before: int = 0,
    ) -> None:
        """Record a stage; only API calls made after *calls_before* count toward it."""
        if not self._run_logger:
            return
        self._run_logger.log_stage(
            stage,
            type(component).__name__,
            input_count=input_count,
            output_count=output_count,
            usage=Usage(api_calls=usage.api_calls[calls_before:]) if usage is not None else None,
            duration_seconds=self._clock() - started,
        )
