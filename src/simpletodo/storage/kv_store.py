# src/simpletodo/storage/kv_store.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "@SimpleTodo:"

TODOS_KEY = f"{STORAGE_PREFIX}todos"
CATEGORIES_KEY = f"{STORAGE_PREFIX}categories"
TAGS_KEY = f"{STORAGE_PREFIX}tags"
SEARCH_HISTORY_KEY = f"{STORAGE_PREFIX}search_history"
QUICK_SEARCHES_KEY = f"{STORAGE_PREFIX}quick_searches"
GESTURE_CONFIG_KEY = f"{STORAGE_PREFIX}gesture_config"
BACKUP_CONFIG_KEY = "@backup_config"


class SqliteKVStore:
    """
    SQLite-backed durable key/value store (string keys -> string blobs).

    Semantics:
    - get() of a missing key returns None
    - set() overwrites atomically (one row, one statement)
    - remove() of a missing key is a no-op
    - no multi-key transactions are offered

    Thread-safety:
    - each call opens its own SQLite connection
    - async methods run the blocking work in a worker thread
    """

    def __init__(self, db_path: str | Path = "kv.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_keys()
        except sqlite3.Error:
            total = -1
        logger.info("SqliteKVStore ready db=%s keys=%s", self._db_path, total)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _get_sync(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def _set_sync(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def _remove_sync(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def count_keys(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM kv").fetchone()
            return int(n)
        finally:
            conn.close()

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("value must be a string blob")
        await asyncio.to_thread(self._set_sync, key, value)
        logger.debug("KV set key=%s bytes=%d", key, len(value))

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove_sync, key)
        logger.debug("KV remove key=%s", key)
