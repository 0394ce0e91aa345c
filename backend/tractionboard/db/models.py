"""Pydantic models matching the SQLite table schemas.

``*Fields`` models are the writable columns (request bodies for create),
``*Patch`` models are partial updates, and the bare names are full rows as
returned by the repositories and the API.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

VtoCategory = Literal["vision", "traction", "objectives"]


class _Row(BaseModel):
    id: str
    created_at: datetime
    updated_at: datetime


# -- Goals --------------------------------------------------------------------

class GoalFields(BaseModel):
    period: str
    title: str
    description: str = ""
    target: str = ""
    current: str = ""
    owner: str = ""
    status: str = "on-track"  # on-track | at-risk | off-track | done
    due_date: str = ""
    category: str = ""


class GoalPatch(BaseModel):
    title: str | None = None
    description: str | None = None
    target: str | None = None
    current: str | None = None
    owner: str | None = None
    status: str | None = None
    due_date: str | None = None
    category: str | None = None


class Goal(_Row, GoalFields):
    """A goal for one period (e.g. ``2024-Q4``)."""


# -- Rocks --------------------------------------------------------------------

class RockFields(BaseModel):
    title: str
    owner: str = ""
    quarter: str = ""
    status: str = "on-track"
    description: str = ""
    due_date: str = ""
    progress: int = Field(default=0, ge=0, le=100)


class RockPatch(BaseModel):
    title: str | None = None
    owner: str | None = None
    quarter: str | None = None
    status: str | None = None
    description: str | None = None
    due_date: str | None = None
    progress: int | None = Field(default=None, ge=0, le=100)


class Rock(_Row, RockFields):
    """A 90-day priority."""


# -- Issues -------------------------------------------------------------------

class IssueFields(BaseModel):
    title: str = ""
    description: str = ""
    priority: str = "medium"  # high | medium | low
    department: str = ""
    owner: str = ""
    status: str = "open"
    created: str = ""
    due: str = ""


class IssuePatch(BaseModel):
    title: str | None = None
    description: str | None = None
    priority: str | None = None
    department: str | None = None
    owner: str | None = None
    status: str | None = None
    created: str | None = None
    due: str | None = None


class Issue(_Row, IssueFields):
    pass


# -- To-dos -------------------------------------------------------------------

class TodoFields(BaseModel):
    title: str = ""
    description: str = ""
    priority: str = "medium"
    assignee: str = ""
    due_date: str = ""
    complete: bool = False


class TodoPatch(BaseModel):
    title: str | None = None
    description: str | None = None
    priority: str | None = None
    assignee: str | None = None
    due_date: str | None = None
    complete: bool | None = None


class Todo(_Row, TodoFields):
    pass


# -- Scorecard ----------------------------------------------------------------

class ScorecardFields(BaseModel):
    """Standard scorecard columns; any other keys are kept as extras."""

    model_config = ConfigDict(extra="allow")

    metric: str = ""
    target: str = ""
    actual: str = ""
    status: str = ""  # green | yellow | red
    owner: str = ""


class ScorecardPatch(BaseModel):
    model_config = ConfigDict(extra="allow")

    metric: str | None = None
    target: str | None = None
    actual: str | None = None
    status: str | None = None
    owner: str | None = None


class ScorecardMetric(_Row, ScorecardFields):
    pass


# -- VTO ----------------------------------------------------------------------

class VtoFields(BaseModel):
    category: VtoCategory
    item: str = ""
    complete: bool = False


class VtoPatch(BaseModel):
    category: VtoCategory | None = None
    item: str | None = None
    complete: bool | None = None


class VtoEntry(_Row, VtoFields):
    pass
