"""Apply a parsed upload to the database.

Writes for one storage key are serialized so two concurrent uploads cannot
interleave their clear/insert steps. The dashboard snapshot is invalidated
after every successful import.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from typing import Any

from tractionboard.db.sqlite import SQLiteDB
from tractionboard.ingestion.classifier import (
    VTO_CATEGORIES,
    ImportResult,
    require_data,
)
from tractionboard.services import Repositories
from tractionboard.services.dashboard import DashboardService

logger = logging.getLogger(__name__)

IMPORT_MODES = ("append", "replace")


@dataclass
class ImportSummary:
    """Outcome of one import.

    Attributes:
        mode: ``append`` or ``replace``.
        counts: Records written per family.
        skipped: Rows the classifier dropped, as ``{line, reason}`` dicts.
    """

    mode: str
    counts: dict[str, int]
    skipped: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"mode": self.mode, "counts": dict(self.counts), "skipped": list(self.skipped)}


class DashboardImporter:
    """Writes ImportResult families into their repositories.

    Import locks are process-wide: every importer instance in the process
    shares one lock per snapshot key, so two importers opened on the same
    database file (the app and an in-process script run, say) cannot
    interleave. The table holds one lock per distinct key and keys come from
    configuration, so it stays as small as the set of configured dashboards.
    """

    _locks: dict[str, threading.Lock] = {}
    _locks_guard = threading.Lock()

    def __init__(
        self,
        db: SQLiteDB,
        repos: Repositories,
        dashboard: DashboardService,
    ) -> None:
        self._db = db
        self._repos = repos
        self._dashboard = dashboard

    @classmethod
    def _lock_for(cls, key: str) -> threading.Lock:
        with cls._locks_guard:
            lock = cls._locks.get(key)
            if lock is None:
                lock = cls._locks[key] = threading.Lock()
            return lock

    def apply(self, result: ImportResult, mode: str = "append") -> ImportSummary:
        """Persist every family present in ``result``.

        In ``replace`` mode each present family is cleared before its rows
        are inserted; families absent from the upload are left alone.

        Raises:
            ValueError: If ``mode`` is not a known import mode.
            EmptyResultError: If the result holds no family at all.
        """
        if mode not in IMPORT_MODES:
            raise ValueError(f"Unknown import mode: '{mode}'. Expected one of {IMPORT_MODES}")
        require_data(result)

        replace = mode == "replace"
        counts: dict[str, int] = {}

        with self._lock_for(self._dashboard.snapshot_key):
            with self._db.transaction():
                if result.scorecard is not None:
                    counts["scorecard"] = self._write(
                        self._repos.scorecard, result.scorecard, replace,
                    )
                if result.vto is not None:
                    items = [
                        {"category": name, "item": entry.item, "complete": entry.complete}
                        for name in VTO_CATEGORIES
                        for entry in result.vto.section(name)
                    ]
                    counts["vto"] = self._write(self._repos.vto, items, replace)
                if result.issues is not None:
                    counts["issues"] = self._write(
                        self._repos.issues, [issue.to_dict() for issue in result.issues], replace,
                    )
                if result.todos is not None:
                    counts["todos"] = self._write(
                        self._repos.todos, [todo.to_dict() for todo in result.todos], replace,
                    )
            self._dashboard.invalidate()

        summary = ImportSummary(
            mode=mode,
            counts=counts,
            skipped=[asdict(row) for row in result.skipped],
        )
        logger.info("Imported %s (%s mode)", counts, mode)
        if summary.skipped:
            logger.debug("Skipped %d rows during import", len(summary.skipped))
        return summary

    @staticmethod
    def _write(repo: Any, records: list[dict[str, Any]], replace: bool) -> int:
        if replace:
            repo.clear()
        return repo.create_many(records)
