"""
SQLite-backed key-value store.

Schema
──────
table: kv
  key        TEXT PRIMARY KEY
  value      TEXT NOT NULL  (JSON)
  expires_at REAL           (unix seconds, NULL = never)

table: kv_sets
  key        TEXT NOT NULL
  member     TEXT NOT NULL
  PRIMARY KEY (key, member)
"""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from newswatch.errors import StoreError

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS kv (
        key        TEXT PRIMARY KEY,
        value      TEXT NOT NULL,
        expires_at REAL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS kv_sets (
        key    TEXT NOT NULL,
        member TEXT NOT NULL,
        PRIMARY KEY (key, member)
    )
    """,
)


class SQLiteKeyValueStore:
    """Durable ``KeyValueStore`` on a single SQLite file.

    The schema is created lazily on first access. Every ``sqlite3.Error`` is
    re-raised as ``StoreError``.

    Args:
        path: Database file; parent directories are created as needed.
        clock: Returns the current time in seconds; used for TTL expiry.
    """

    def __init__(self, path: Path | str, clock: Callable[[], float] = time.time) -> None:
        self._path = Path(path)
        self._clock = clock
        self._initialised = False

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside an immediate transaction."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self._path), isolation_level=None, timeout=10.0)
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"cannot open {self._path}: {e}") from e

        try:
            if not self._initialised:
                for statement in _SCHEMA:
                    conn.execute(statement)
                self._initialised = True
                logger.info("Key-value store initialised at %s", self._path)
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def _live_value(self, conn: sqlite3.Connection, key: str) -> str | None:
        row = conn.execute("SELECT value, expires_at FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        value, expires_at = row
        if expires_at is not None and self._clock() >= expires_at:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            return None
        return value

    def get(self, key: str) -> Any | None:
        with self._connect() as conn:
            raw = self._live_value(conn, key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StoreError(f"corrupt value for {key!r}: {e}") from e

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        expires_at = None if ttl_seconds is None else self._clock() + ttl_seconds
        payload = json.dumps(value, ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv (key, value, expires_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                "expires_at = excluded.expires_at",
                (key, payload, expires_at),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.execute("DELETE FROM kv_sets WHERE key = ?", (key,))

    def incr(self, key: str) -> int:
        with self._connect() as conn:
            raw = self._live_value(conn, key)
            try:
                value = (int(json.loads(raw)) if raw is not None else 0) + 1
            except (ValueError, TypeError) as e:
                raise StoreError(f"non-integer counter {key!r}: {e}") from e
            conn.execute(
                "INSERT INTO kv (key, value, expires_at) VALUES (?, ?, NULL) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(value)),
            )
        return value

    def sadd(self, key: str, *members: str) -> int:
        if not members:
            return 0
        with self._connect() as conn:
            before = conn.total_changes
            conn.executemany(
                "INSERT OR IGNORE INTO kv_sets (key, member) VALUES (?, ?)",
                [(key, m) for m in members],
            )
            return conn.total_changes - before

    def srem(self, key: str, *members: str) -> int:
        if not members:
            return 0
        with self._connect() as conn:
            before = conn.total_changes
            conn.executemany(
                "DELETE FROM kv_sets WHERE key = ? AND member = ?",
                [(key, m) for m in members],
            )
            return conn.total_changes - before

    def smembers(self, key: str) -> set[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT member FROM kv_sets WHERE key = ?", (key,)).fetchall()
        return {row[0] for row in rows}

    def sismember(self, key: str, member: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM kv_sets WHERE key = ? AND member = ?", (key, member)
            ).fetchone()
        return row is not None
