"""Fixed-size fan-out with per-unit error isolation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchOutcome(Generic[R]):
    """Successful results and error messages from ``run_in_batches``.

    ``stopped_early`` is set when ``should_stop`` withheld a group.
    """

    results: list[R] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    stopped_early: bool = False


def describe_error(error: BaseException) -> str:
    return str(error) or type(error).__name__


async def run_in_batches(
    items: Sequence[T],
    concurrency: int,
    fn: Callable[[T], Awaitable[R]],
    *,
    should_stop: Callable[[], bool] | None = None,
) -> BatchOutcome[R]:
    """Run *fn* over *items* in sequential groups of *concurrency*.

    Each group is awaited with join-all-settle semantics: a failing unit is
    recorded in ``errors`` and never cancels its siblings. ``should_stop`` is
    consulted before each group; once it returns True no further group is
    started, while results already collected are kept.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    outcome: BatchOutcome[R] = BatchOutcome()
    for i in range(0, len(items), concurrency):
        if should_stop is not None and should_stop():
            outcome.stopped_early = True
            break
        group = items[i : i + concurrency]
        settled = await asyncio.gather(*(fn(item) for item in group), return_exceptions=True)
        for result in settled:
            if isinstance(result, BaseException):
                logger.warning(f"Unit failed: {result!r}")
                outcome.errors.append(describe_error(result))
                continue
            outcome.results.append(result)
    return outcome
