"""Crawl coordination: batching, time budget and the crawler itself."""

from newswatch.pipeline.batching import BatchOutcome, run_in_batches
from newswatch.pipeline.budget import DEFAULT_TIME_LIMIT_SECONDS, TimeBudget
from newswatch.pipeline.crawl import NewsCrawler

__all__ = [
    "BatchOutcome",
    "DEFAULT_TIME_LIMIT_SECONDS",
    "NewsCrawler",
    "TimeBudget",
    "run_in_batches",
]
