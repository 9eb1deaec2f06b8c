"""Persistent key-value slots for store snapshots.

A slot holds one JSON document under a fixed key and is overwritten on every
save. Two backends are provided:

- SQLiteSlotStore: survives process restarts (default for the service)
- MemorySlotStore: process-local, used by tests and throwaway sessions
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv_slots (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


@runtime_checkable
class SlotStore(Protocol):
    """Key-value storage for serialized snapshots."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the slot is empty."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing whatever the slot held."""
        ...

    def close(self) -> None:
        ...


class MemorySlotStore:
    """Dictionary-backed slot store."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Slot values must be str, got {type(value).__name__}")
        with self._lock:
            self._values[key] = value

    def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._values)


class SQLiteSlotStore:
    """SQLite-backed slot store.

    Example:
        with SQLiteSlotStore("data/balances.db") as slots:
            slots.set("dailyBalancesData", '{"openingBalance": ...}')
            raw = slots.get("dailyBalancesData")
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Open (and create if needed) the slot database.

        Args:
            db_path: Path to SQLite database file. Defaults to data/balances.db
        """
        if db_path is None:
            db_path = Path.cwd() / "data" / "balances.db"
        else:
            db_path = Path(db_path)

        db_path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self._ensure_connection()
        self._ensure_schema()

    def _ensure_connection(self) -> None:
        if self._conn is None:
            # FastAPI runs sync endpoints in a threadpool
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode = WAL")
            self._conn.execute("PRAGMA synchronous = NORMAL")
            self._conn.execute("PRAGMA busy_timeout = 5000")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        conn.executescript(SCHEMA_SQL)
        conn.commit()

    def _get_conn(self) -> sqlite3.Connection:
        self._ensure_connection()
        assert self._conn is not None
        return self._conn

    def get(self, key: str) -> str | None:
        with self._lock:
            row = self._get_conn().execute(
                "SELECT value FROM kv_slots WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Slot values must be str, got {type(value).__name__}")
        updated_at = datetime.now(timezone.utc).isoformat()
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                """
                INSERT INTO kv_slots (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, updated_at),
            )
            conn.commit()

    def updated_at(self, key: str) -> datetime | None:
        """When the slot was last written, or None if it is empty."""
        with self._lock:
            row = self._get_conn().execute(
                "SELECT updated_at FROM kv_slots WHERE key = ?", (key,)
            ).fetchone()
        return datetime.fromisoformat(row[0]) if row else None

    def ping(self) -> None:
        """Raise if the database is not reachable."""
        with self._lock:
            self._get_conn().execute("SELECT 1")

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> SQLiteSlotStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["SlotStore", "MemorySlotStore", "SQLiteSlotStore"]
