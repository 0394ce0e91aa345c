"""Application services that sit between the API and the repositories."""

from __future__ import annotations

from dataclasses import dataclass

from tractionboard.db.repositories import (
    GoalRepo,
    IssueRepo,
    RockRepo,
    ScorecardRepo,
    SnapshotRepo,
    TodoRepo,
    VtoRepo,
)
from tractionboard.db.sqlite import SQLiteDB


@dataclass
class Repositories:
    """All repositories sharing one database."""

    goals: GoalRepo
    rocks: RockRepo
    issues: IssueRepo
    todos: TodoRepo
    scorecard: ScorecardRepo
    vto: VtoRepo
    snapshots: SnapshotRepo

    @classmethod
    def from_db(cls, db: SQLiteDB) -> "Repositories":
        return cls(
            goals=GoalRepo(db),
            rocks=RockRepo(db),
            issues=IssueRepo(db),
            todos=TodoRepo(db),
            scorecard=ScorecardRepo(db),
            vto=VtoRepo(db),
            snapshots=SnapshotRepo(db),
        )

    def entity(self, name: str):
        """Look up an entity repo by its API name (``goals``, ``vto``, ...)."""
        if name not in ENTITY_NAMES:
            raise KeyError(name)
        return getattr(self, name)


ENTITY_NAMES = ("goals", "rocks", "issues", "todos", "scorecard", "vto")
