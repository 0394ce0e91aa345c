"""Dashboard read model.

The relational store is the single source of truth. The assembled
dashboard is cached as a snapshot under a fixed key and rebuilt on the next
read after any write invalidates it.
"""

from __future__ import annotations

import logging
from typing import Any

from tractionboard.services import Repositories

logger = logging.getLogger(__name__)


class DashboardService:
    """Builds and caches the combined dashboard payload."""

    def __init__(self, repos: Repositories, snapshot_key: str = "ninetyData") -> None:
        self._repos = repos
        self.snapshot_key = snapshot_key

    def build(self) -> dict[str, Any]:
        """Assemble the dashboard straight from the repositories."""
        return {
            "goals": self._repos.goals.list_all(),
            "rocks": self._repos.rocks.list_all(),
            "issues": self._repos.issues.list_all(),
            "todos": self._repos.todos.list_all(),
            "scorecard": self._repos.scorecard.list_all(),
            "vto": self._repos.vto.board(),
        }

    def get_dashboard(self) -> dict[str, Any]:
        """Return the cached dashboard, rebuilding it on a cache miss."""
        cached = self._repos.snapshots.get(self.snapshot_key)
        if cached is not None:
            return cached
        data = self.build()
        self._repos.snapshots.put(self.snapshot_key, data)
        logger.debug("Rebuilt dashboard snapshot %s", self.snapshot_key)
        return data

    def invalidate(self) -> None:
        """Drop the cached snapshot; call after every write."""
        self._repos.snapshots.delete(self.snapshot_key)
