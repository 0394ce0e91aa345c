"""SQLite database schema and connection manager for Tractionboard.

Provides the SQLiteDB class, the single entry point for all relational
persistence. Enables WAL mode and foreign keys on connect and creates the
full schema (7 tables) on initialization.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Sequence


_SCHEMA_SQL = """
-- Annual/quarterly goals, one per period
CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    period TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    target TEXT NOT NULL DEFAULT '',
    current TEXT NOT NULL DEFAULT '',
    owner TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'on-track',
    due_date TEXT NOT NULL DEFAULT '',
    category TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Quarterly rocks
CREATE TABLE IF NOT EXISTS rocks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    owner TEXT NOT NULL DEFAULT '',
    quarter TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'on-track',
    description TEXT NOT NULL DEFAULT '',
    due_date TEXT NOT NULL DEFAULT '',
    progress INTEGER NOT NULL DEFAULT 0 CHECK(progress BETWEEN 0 AND 100),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Issues list
CREATE TABLE IF NOT EXISTS issues (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    priority TEXT NOT NULL DEFAULT 'medium',
    department TEXT NOT NULL DEFAULT '',
    owner TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'open',
    created TEXT NOT NULL DEFAULT '',
    due TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- To-dos
CREATE TABLE IF NOT EXISTS todos (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    priority TEXT NOT NULL DEFAULT 'medium',
    assignee TEXT NOT NULL DEFAULT '',
    due_date TEXT NOT NULL DEFAULT '',
    complete INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Weekly scorecard metrics (extra holds any non-standard imported columns)
CREATE TABLE IF NOT EXISTS scorecard_metrics (
    id TEXT PRIMARY KEY,
    metric TEXT NOT NULL DEFAULT '',
    target TEXT NOT NULL DEFAULT '',
    actual TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT '',
    owner TEXT NOT NULL DEFAULT '',
    extra TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Vision / traction / objectives board
CREATE TABLE IF NOT EXISTS vto_items (
    id TEXT PRIMARY KEY,
    category TEXT NOT NULL CHECK(category IN ('vision','traction','objectives')),
    item TEXT NOT NULL DEFAULT '',
    complete INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Cached read models keyed by name
CREATE TABLE IF NOT EXISTS snapshots (
    key TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class SQLiteDB:
    """SQLite connection manager with schema auto-creation.

    The connection is shared across threads; every statement runs under an
    internal re-entrant lock. Statements outside ``transaction()`` commit
    immediately.

    Usage:
        db = SQLiteDB("/path/to/db.sqlite")
        db.execute("INSERT INTO ...", params)
        rows = db.fetchall("SELECT * FROM ...")

        with db.transaction():
            db.execute("DELETE FROM ...")
            db.executemany("INSERT INTO ...", rows)
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._tx_depth = 0
        self._configure()
        self._create_schema()

    def _configure(self) -> None:
        """Enable WAL mode and foreign keys."""
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

    def _create_schema(self) -> None:
        """Create all tables if they don't exist."""
        self._conn.executescript(_SCHEMA_SQL)
        self._conn.commit()

    def _maybe_commit(self) -> None:
        if self._tx_depth == 0:
            self._conn.commit()

    @contextmanager
    def transaction(self) -> Iterator["SQLiteDB"]:
        """Group statements into one commit; roll back if the block raises."""
        with self._lock:
            self._tx_depth += 1
            try:
                yield self
            except BaseException:
                if self._tx_depth == 1:
                    self._conn.rollback()
                raise
            else:
                if self._tx_depth == 1:
                    self._conn.commit()
            finally:
                self._tx_depth -= 1

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """Execute a single SQL statement and commit."""
        with self._lock:
            cursor = self._conn.execute(sql, params)
            self._maybe_commit()
            return cursor

    def executemany(self, sql: str, params_seq: Sequence[Sequence[Any]]) -> sqlite3.Cursor:
        """Execute a SQL statement for each set of params and commit."""
        with self._lock:
            cursor = self._conn.executemany(sql, params_seq)
            self._maybe_commit()
            return cursor

    def fetchone(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        """Execute a query and return the first row as a dict, or None."""
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
        if row is None:
            return None
        return dict(row)

    def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute a query and return all rows as a list of dicts."""
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "SQLiteDB":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
