"""Data access repositories over SQLiteDB.

Each repo takes a SQLiteDB instance via dependency injection. Repositories
are the single entry point for all persistence: no direct DB access from
services or API routes.

Every entity repo offers the same contract: ``list_all()``, ``get(id)``,
``create(record)``, ``update(id, patch)`` and ``delete(id)``. Keys that are
not columns of the entity are ignored.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from tractionboard.db.sqlite import SQLiteDB

logger = logging.getLogger(__name__)

_ROW_METADATA = frozenset({"id", "created_at", "updated_at"})


def _now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class EntityRepo:
    """Generic single-table repository.

    Subclasses set ``table`` and ``columns`` (the writable columns) and list
    the columns stored as 0/1 in ``bool_columns``.
    """

    table: str = ""
    columns: tuple[str, ...] = ()
    bool_columns: frozenset[str] = frozenset()

    def __init__(self, db: SQLiteDB) -> None:
        self._db = db

    # -- conversion hooks ------------------------------------------------------

    def _to_row(self, record: Mapping[str, Any]) -> dict[str, Any]:
        row: dict[str, Any] = {}
        for key in self.columns:
            if key in record and record[key] is not None:
                value = record[key]
                row[key] = int(bool(value)) if key in self.bool_columns else value
        return row

    def _from_row(self, row: dict[str, Any]) -> dict[str, Any]:
        for key in self.bool_columns:
            if key in row:
                row[key] = bool(row[key])
        return row

    # -- reads -----------------------------------------------------------------

    def get(self, entity_id: str) -> dict[str, Any] | None:
        """Get a single record by ID."""
        row = self._db.fetchone(f"SELECT * FROM {self.table} WHERE id = ?", (entity_id,))
        return self._from_row(row) if row is not None else None

    def list_all(self) -> list[dict[str, Any]]:
        """List all records in insertion order."""
        rows = self._db.fetchall(f"SELECT * FROM {self.table} ORDER BY rowid")
        return [self._from_row(row) for row in rows]

    def count(self) -> int:
        row = self._db.fetchone(f"SELECT COUNT(*) AS n FROM {self.table}")
        return int(row["n"]) if row else 0

    # -- writes ----------------------------------------------------------------

    def _insert(self, record: Mapping[str, Any]) -> str:
        row = self._to_row(record)
        entity_id = _new_id()
        now = _now_iso()
        row.update(id=entity_id, created_at=now, updated_at=now)
        names = ", ".join(row)
        marks = ", ".join("?" for _ in row)
        self._db.execute(
            f"INSERT INTO {self.table} ({names}) VALUES ({marks})",
            tuple(row.values()),
        )
        return entity_id

    def create(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Insert a record and return it as stored."""
        entity_id = self._insert(record)
        return self.get(entity_id)  # type: ignore[return-value]

    def create_many(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Insert records in one transaction. Returns the number inserted."""
        inserted = 0
        with self._db.transaction():
            for record in records:
                self._insert(record)
                inserted += 1
        return inserted

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> dict[str, Any] | None:
        """Apply a partial update and return the updated record.

        Returns None if no record has ``entity_id``.
        """
        if self.get(entity_id) is None:
            return None
        changes = self._to_row(patch)
        changes["updated_at"] = _now_iso()
        assignments = ", ".join(f"{name} = ?" for name in changes)
        self._db.execute(
            f"UPDATE {self.table} SET {assignments} WHERE id = ?",
            (*changes.values(), entity_id),
        )
        return self.get(entity_id)

    def delete(self, entity_id: str) -> bool:
        """Delete a record. Returns True if a row was removed."""
        cursor = self._db.execute(f"DELETE FROM {self.table} WHERE id = ?", (entity_id,))
        return cursor.rowcount > 0

    def clear(self) -> int:
        """Delete every record. Returns the number removed."""
        cursor = self._db.execute(f"DELETE FROM {self.table}")
        return cursor.rowcount


class GoalRepo(EntityRepo):
    """Repository for goals. Periods are unique, so goals can also be
    addressed by period."""

    table = "goals"
    columns = (
        "period", "title", "description", "target", "current",
        "owner", "status", "due_date", "category",
    )

    def get_by_period(self, period: str) -> dict[str, Any] | None:
        return self._db.fetchone("SELECT * FROM goals WHERE period = ?", (period,))

    def update_by_period(self, period: str, patch: Mapping[str, Any]) -> dict[str, Any] | None:
        """Update the goal for ``period``; None if there is none."""
        goal = self.get_by_period(period)
        if goal is None:
            return None
        changes = {key: value for key, value in patch.items() if key != "period"}
        return self.update(goal["id"], changes)


class RockRepo(EntityRepo):
    """Repository for quarterly rocks."""

    table = "rocks"
    columns = ("title", "owner", "quarter", "status", "description", "due_date", "progress")

    def list_by_quarter(self, quarter: str) -> list[dict[str, Any]]:
        return self._db.fetchall(
            "SELECT * FROM rocks WHERE quarter = ? ORDER BY rowid", (quarter,),
        )


class IssueRepo(EntityRepo):
    table = "issues"
    columns = (
        "title", "description", "priority", "department",
        "owner", "status", "created", "due",
    )


class TodoRepo(EntityRepo):
    table = "todos"
    columns = ("title", "description", "priority", "assignee", "due_date", "complete")
    bool_columns = frozenset({"complete"})

    def _to_row(self, record: Mapping[str, Any]) -> dict[str, Any]:
        # Imported to-dos carry their due date as ``dueDate``
        if "dueDate" in record and "due_date" not in record:
            record = {**record, "due_date": record["dueDate"]}
        return super()._to_row(record)


class ScorecardRepo(EntityRepo):
    """Repository for scorecard metrics.

    Imported scorecard rows are free-form; columns beyond the standard ones
    are stored as JSON in ``extra`` and flattened back on read. An imported
    column literally named ``extra`` round-trips the same way. Columns named
    like the row metadata (``id``, ``created_at``, ``updated_at``) cannot be
    stored without shadowing it and are dropped with a debug log.
    """

    table = "scorecard_metrics"
    columns = ("metric", "target", "actual", "status", "owner")

    def _to_row(self, record: Mapping[str, Any]) -> dict[str, Any]:
        row = super()._to_row(record)
        shadowed = sorted(key for key in record if key in _ROW_METADATA)
        if shadowed:
            logger.debug("Dropping scorecard columns that shadow row metadata: %s", shadowed)
        extra = {
            key: value for key, value in record.items()
            if key not in self.columns and key not in _ROW_METADATA
        }
        if extra:
            row["extra"] = json.dumps(extra)
        return row

    def _from_row(self, row: dict[str, Any]) -> dict[str, Any]:
        extra = row.pop("extra", None)
        if extra:
            for key, value in json.loads(extra).items():
                row.setdefault(key, value)
        return row

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> dict[str, Any] | None:
        current = self.get(entity_id)
        if current is None:
            return None
        # Re-merge so a patch with one extra column keeps the others
        merged = {key: value for key, value in current.items() if key not in _ROW_METADATA}
        merged.update(patch)
        changes = self._to_row(merged)
        changes.setdefault("extra", None)
        changes["updated_at"] = _now_iso()
        assignments = ", ".join(f"{name} = ?" for name in changes)
        self._db.execute(
            f"UPDATE {self.table} SET {assignments} WHERE id = ?",
            (*changes.values(), entity_id),
        )
        return self.get(entity_id)


class VtoRepo(EntityRepo):
    """Repository for vision / traction / objectives items."""

    table = "vto_items"
    columns = ("category", "item", "complete")
    bool_columns = frozenset({"complete"})

    def board(self) -> dict[str, list[dict[str, Any]]]:
        """Group items by category, each list in insertion order."""
        board: dict[str, list[dict[str, Any]]] = {
            "vision": [],
            "traction": [],
            "objectives": [],
        }
        for row in self.list_all():
            board[row["category"]].append(row)
        return board


class SnapshotRepo:
    """Named JSON documents, used as a cache of computed read models."""

    def __init__(self, db: SQLiteDB) -> None:
        self._db = db

    def get(self, key: str) -> Any | None:
        row = self._db.fetchone("SELECT payload FROM snapshots WHERE key = ?", (key,))
        if row is None:
            return None
        return json.loads(row["payload"])

    def put(self, key: str, payload: Any) -> None:
        self._db.execute(
            "INSERT INTO snapshots (key, payload, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET payload = excluded.payload, "
            "updated_at = excluded.updated_at",
            (key, json.dumps(payload), _now_iso()),
        )

    def delete(self, key: str) -> bool:
        cursor = self._db.execute("DELETE FROM snapshots WHERE key = ?", (key,))
        return cursor.rowcount > 0
