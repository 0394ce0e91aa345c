"""Tractionboard persistence layer (SQLite)."""

from tractionboard.db.models import (
    Goal,
    Issue,
    Rock,
    ScorecardMetric,
    Todo,
    VtoEntry,
)
from tractionboard.db.repositories import (
    EntityRepo,
    GoalRepo,
    IssueRepo,
    RockRepo,
    ScorecardRepo,
    SnapshotRepo,
    TodoRepo,
    VtoRepo,
)
from tractionboard.db.sqlite import SQLiteDB

__all__ = [
    "SQLiteDB",
    "Goal",
    "Rock",
    "Issue",
    "Todo",
    "ScorecardMetric",
    "VtoEntry",
    "EntityRepo",
    "GoalRepo",
    "RockRepo",
    "IssueRepo",
    "TodoRepo",
    "ScorecardRepo",
    "VtoRepo",
    "SnapshotRepo",
]
