"""In-process key-value backend."""

from __future__ import annotations

import copy
import time
from collections.abc import Callable
from typing import Any


class MemoryKeyValueStore:
    """Dictionary-backed ``KeyValueStore``.

    State lives only as long as the process. Useful for tests and dry runs.

    Args:
        clock: Returns the current time in seconds; used for TTL expiry.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._values: dict[str, Any] = {}
        self._expiry: dict[str, float] = {}
        self._sets: dict[str, set[str]] = {}

    def _expire(self, key: str) -> None:
        deadline = self._expiry.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._values.pop(key, None)
            self._expiry.pop(key, None)

    def get(self, key: str) -> Any | None:
        self._expire(key)
        # Callers must not be able to mutate stored values in place
        return copy.deepcopy(self._values.get(key))

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        self._values[key] = copy.deepcopy(value)
        if ttl_seconds is None:
            self._expiry.pop(key, None)
        else:
            self._expiry[key] = self._clock() + ttl_seconds

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
        self._expiry.pop(key, None)
        self._sets.pop(key, None)

    def incr(self, key: str) -> int:
        self._expire(key)
        value = int(self._values.get(key) or 0) + 1
        self._values[key] = value
        return value

    def sadd(self, key: str, *members: str) -> int:
        bucket = self._sets.setdefault(key, set())
        before = len(bucket)
        bucket.update(members)
        return len(bucket) - before

    def srem(self, key: str, *members: str) -> int:
        bucket = self._sets.get(key, set())
        before = len(bucket)
        bucket.difference_update(members)
        return before - len(bucket)

    def smembers(self, key: str) -> set[str]:
        return set(self._sets.get(key, set()))

    def sismember(self, key: str, member: str) -> bool:
        return member in self._sets.get(key, set())
