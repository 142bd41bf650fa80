"""Protocol for the key-value backend behind ``NewsStore``."""

from __future__ import annotations

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Minimal Redis-like key-value interface.

    Values passed to ``set`` must be JSON-serialisable. Backends raise
    ``newswatch.errors.StoreError`` when an operation cannot be completed.
    """

    def get(self, key: str) -> Any | None:
        """Return the value stored at *key*, or None if missing or expired."""
        ...

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """Store *value* at *key*, optionally expiring after *ttl_seconds*."""
        ...

    def delete(self, key: str) -> None: ...

    def incr(self, key: str) -> int:
        """Atomically increment the integer at *key* and return the new value."""
        ...

    def sadd(self, key: str, *members: str) -> int:
        """Add members to the set at *key*; return how many were new."""
        ...

    def srem(self, key: str, *members: str) -> int:
        """Remove members from the set at *key*; return how many were removed."""
        ...

    def smembers(self, key: str) -> set[str]: ...

    def sismember(self, key: str, member: str) -> bool: ...
