"""Wall-clock budget for a crawl run."""

import time
from collections.abc import Callable

# Leaves a margin under a 300 s external execution limit
DEFAULT_TIME_LIMIT_SECONDS = 250.0


class TimeBudget:
    """Tracks elapsed time against a fixed ceiling.

    The budget only reports; callers decide not to start new work once it is
    exceeded. Work already in flight is never interrupted.

    Args:
        limit_seconds: Ceiling measured from construction.
        clock: Monotonic clock in seconds.
    """

    def __init__(
        self,
        limit_seconds: float = DEFAULT_TIME_LIMIT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = limit_seconds
        self._clock = clock
        self._started = clock()

    @property
    def limit_seconds(self) -> float:
        return self._limit

    def elapsed(self) -> float:
        return self._clock() - self._started

    def exceeded(self) -> bool:
        return self.elapsed() >= self._limit
