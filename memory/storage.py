# memory/storage.py
from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Optional

import config as cfg
from backend.errors import PersistenceError

log = logging.getLogger("gemchat.storage")


class LocalStorage:
    """
    Tiny key/value store (think browser localStorage) on top of SQLite.

    One row per key in `app_state`; values are opaque strings. Reads that hit a
    broken database raise PersistenceError, writes are left to the caller.
    """

    def __init__(self, db_path: Optional[str] = None, *, wal: Optional[bool] = None) -> None:
        self._db_path = db_path or cfg.settings.db_path
        self._wal = cfg.settings.db_wal if wal is None else wal
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            if self._wal:
                conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
        except sqlite3.DatabaseError as e:
            # Not a database at all (or locked beyond repair); callers decide what to do.
            conn.close()
            raise PersistenceError(f"cannot open {self._db_path}", details=str(e)) from e
        with conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS app_state (
                    key TEXT PRIMARY KEY,
                    value TEXT
                );
                """
            )
        self._conn = conn
        return conn

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            try:
                conn = self._connect()
                row = conn.execute("SELECT value FROM app_state WHERE key = ?;", (key,)).fetchone()
            except sqlite3.DatabaseError as e:
                raise PersistenceError(f"cannot read {key!r}", details=str(e)) from e
        return None if row is None else row["value"]

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            conn = self._connect()
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO app_state (key, value) VALUES (?, ?);",
                    (key, value),
                )

    def remove_item(self, key: str) -> None:
        with self._lock:
            conn = self._connect()
            with conn:
                conn.execute("DELETE FROM app_state WHERE key = ?;", (key,))

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
