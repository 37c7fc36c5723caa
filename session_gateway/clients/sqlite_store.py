"""SQLite-backed substitute for a hosted key-value store."""

from __future__ import annotations

import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from session_gateway.core.errors import StoreUnavailableError


class SQLiteKVStore:
    """Key-value table with an absolute expiry column per row.

    Expired rows are invisible to ``get`` and pruned opportunistically on
    ``put``, which mirrors the eventual eviction of hosted stores.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Cannot open session database: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Session database error: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_sessions (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    expires_at REAL NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[bytes]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv_sessions WHERE key = ? AND expires_at > ?",
                (key, time.time()),
            ).fetchone()
        if not row:
            return None
        return bytes(row[0])

    def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        now = time.time()
        with self._connect() as conn:
            conn.execute("DELETE FROM kv_sessions WHERE expires_at <= ?", (now,))
            conn.execute(
                """
                INSERT INTO kv_sessions (key, value, expires_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    expires_at = excluded.expires_at
                """,
                (key, sqlite3.Binary(value), now + ttl_seconds),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv_sessions WHERE key = ?", (key,))


__all__ = ["SQLiteKVStore"]
