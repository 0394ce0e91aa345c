"""Tests for tractionboard.db.sqlite: SQLite schema and connection manager."""

import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest

from tractionboard.db.sqlite import SQLiteDB


@pytest.fixture
def tmp_db(tmp_path: Path) -> SQLiteDB:
    """Create a fresh SQLiteDB instance on a temp path."""
    db = SQLiteDB(str(tmp_path / "test.db"))
    yield db
    db.close()


def _insert_todo(db: SQLiteDB, title: str) -> str:
    todo_id = str(uuid.uuid4())
    now = datetime.now(timezone.utc).isoformat()
    db.execute(
        "INSERT INTO todos (id, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
        (todo_id, title, now, now),
    )
    return todo_id


class TestSchemaCreation:
    """Schema creates all tables on fresh database."""

    def test_all_seven_tables_exist(self, tmp_db: SQLiteDB):
        rows = tmp_db.fetchall(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        table_names = sorted(row["name"] for row in rows)
        assert table_names == sorted([
            "goals",
            "rocks",
            "issues",
            "todos",
            "scorecard_metrics",
            "vto_items",
            "snapshots",
        ])

    def test_schema_creation_is_repeatable(self, tmp_path: Path):
        """Opening the same file twice does not fail on existing tables."""
        path = str(tmp_path / "again.db")
        SQLiteDB(path).close()
        db = SQLiteDB(path)
        assert db.fetchone("SELECT COUNT(*) AS n FROM goals")["n"] == 0
        db.close()


class TestPragmas:

    def test_wal_mode_enabled(self, tmp_db: SQLiteDB):
        result = tmp_db.fetchone("PRAGMA journal_mode")
        assert result["journal_mode"] == "wal"

    def test_foreign_keys_enabled(self, tmp_db: SQLiteDB):
        result = tmp_db.fetchone("PRAGMA foreign_keys")
        assert result["foreign_keys"] == 1


class TestConstraints:
    """CHECK and UNIQUE constraints reject bad rows."""

    def test_todo_defaults(self, tmp_db: SQLiteDB):
        todo_id = _insert_todo(tmp_db, "Plan")
        row = tmp_db.fetchone("SELECT * FROM todos WHERE id = ?", (todo_id,))
        assert row["priority"] == "medium"
        assert row["complete"] == 0

    def test_invalid_vto_category_raises(self, tmp_db: SQLiteDB):
        now = datetime.now(timezone.utc).isoformat()
        with pytest.raises(sqlite3.IntegrityError):
            tmp_db.execute(
                "INSERT INTO vto_items (id, category, item, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (str(uuid.uuid4()), "milestones", "Launch", now, now),
            )

    def test_rock_progress_out_of_range_raises(self, tmp_db: SQLiteDB):
        now = datetime.now(timezone.utc).isoformat()
        with pytest.raises(sqlite3.IntegrityError):
            tmp_db.execute(
                "INSERT INTO rocks (id, title, progress, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (str(uuid.uuid4()), "Launch", 150, now, now),
            )

    def test_goal_period_is_unique(self, tmp_db: SQLiteDB):
        now = datetime.now(timezone.utc).isoformat()
        sql = (
            "INSERT INTO goals (id, period, title, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?)"
        )
        tmp_db.execute(sql, (str(uuid.uuid4()), "2024-Q4", "Grow", now, now))
        with pytest.raises(sqlite3.IntegrityError):
            tmp_db.execute(sql, (str(uuid.uuid4()), "2024-Q4", "Grow more", now, now))


class TestTransactions:
    """transaction() commits once and rolls back on error."""

    def test_commit_on_success(self, tmp_db: SQLiteDB):
        with tmp_db.transaction():
            _insert_todo(tmp_db, "A")
            _insert_todo(tmp_db, "B")
        assert tmp_db.fetchone("SELECT COUNT(*) AS n FROM todos")["n"] == 2

    def test_rollback_on_error(self, tmp_db: SQLiteDB):
        _insert_todo(tmp_db, "Kept")
        with pytest.raises(RuntimeError):
            with tmp_db.transaction():
                tmp_db.execute("DELETE FROM todos")
                _insert_todo(tmp_db, "Discarded")
                raise RuntimeError("boom")
        rows = tmp_db.fetchall("SELECT title FROM todos")
        assert [row["title"] for row in rows] == ["Kept"]

    def test_nested_transaction_rolls_back_outer(self, tmp_db: SQLiteDB):
        """An error in a nested block undoes the whole outer transaction."""
        with pytest.raises(RuntimeError):
            with tmp_db.transaction():
                _insert_todo(tmp_db, "Outer")
                with tmp_db.transaction():
                    _insert_todo(tmp_db, "Inner")
                    raise RuntimeError("boom")
        assert tmp_db.fetchone("SELECT COUNT(*) AS n FROM todos")["n"] == 0


class TestQueries:

    def test_fetchone_returns_none_when_missing(self, tmp_db: SQLiteDB):
        assert tmp_db.fetchone("SELECT * FROM todos WHERE id = ?", ("nope",)) is None

    def test_fetchall_returns_dicts(self, tmp_db: SQLiteDB):
        _insert_todo(tmp_db, "Plan")
        rows = tmp_db.fetchall("SELECT title FROM todos")
        assert rows == [{"title": "Plan"}]

    def test_executemany(self, tmp_db: SQLiteDB):
        now = datetime.now(timezone.utc).isoformat()
        tmp_db.executemany(
            "INSERT INTO issues (id, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
            [(str(uuid.uuid4()), title, now, now) for title in ("A", "B", "C")],
        )
        assert tmp_db.fetchone("SELECT COUNT(*) AS n FROM issues")["n"] == 3

    def test_context_manager_closes(self, tmp_path: Path):
        with SQLiteDB(str(tmp_path / "ctx.db")) as db:
            _insert_todo(db, "Plan")
        with pytest.raises(sqlite3.ProgrammingError):
            db.fetchall("SELECT * FROM todos")
