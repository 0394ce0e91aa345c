"""Classifier for the mixed-family dashboard CSV export.

A single upload carries scorecard, VTO, issue and to-do rows side by side.
Column 0 of every data row names the row's family; the remaining columns are
paired with the header line to build a field map, which is then shaped into
the family's record with its defaults applied.

Best-effort parsing: a malformed row is dropped, never fatal. Only an input
without a header and at least one data row is rejected. Dropped rows are
reported through ``ImportResult.skipped`` for callers that want diagnostics.
"""

from __future__ import annotations

import csv
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Sequence

VTO_CATEGORIES = ("vision", "traction", "objectives")

FORMAT_ERROR_MESSAGE = "CSV must have at least a header and one data row"
NO_DATA_MESSAGE = "No valid data found. Please check your CSV format."

# Reasons recorded in ImportResult.skipped
SKIP_SHORT_ROW = "short_row"
SKIP_UNKNOWN_TYPE = "unknown_type"
SKIP_UNKNOWN_VTO_CATEGORY = "unknown_vto_category"


class IngestionError(ValueError):
    """Base class for import failures whose message is safe to show users."""


class FormatError(IngestionError):
    """The input does not contain a header row and at least one data row."""


class EmptyResultError(IngestionError):
    """The input parsed cleanly but contained no recognized rows."""


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass
class VtoItem:
    item: str
    complete: bool = False


@dataclass
class VtoBoard:
    """Vision / traction / objectives items, in file order."""

    vision: list[VtoItem] = field(default_factory=list)
    traction: list[VtoItem] = field(default_factory=list)
    objectives: list[VtoItem] = field(default_factory=list)

    def section(self, category: str) -> list[VtoItem]:
        if category not in VTO_CATEGORIES:
            raise KeyError(category)
        return getattr(self, category)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {name: [asdict(item) for item in self.section(name)] for name in VTO_CATEGORIES}


@dataclass
class IssueRow:
    title: str = ""
    description: str = ""
    priority: str = "medium"
    department: str = ""
    owner: str = ""
    status: str = "open"
    created: str = ""
    due: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TodoRow:
    title: str = ""
    description: str = ""
    priority: str = "medium"
    assignee: str = ""
    due_date: str = ""
    complete: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Wire format; the due date travels as ``dueDate``."""
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "assignee": self.assignee,
            "dueDate": self.due_date,
            "complete": self.complete,
        }


@dataclass
class SkippedRow:
    line: int
    reason: str


@dataclass
class ImportResult:
    """Everything recognized in one upload.

    Each family member stays ``None`` until the first row of that family is
    seen, so an absent member means "not present in the file" rather than
    "present but empty".

    Attributes:
        scorecard: Free-form metric rows keyed by header name.
        vto: The vision/traction/objectives board.
        issues: Issue records with defaults applied.
        todos: To-do records with defaults applied.
        skipped: Rows dropped during classification (diagnostics only).
    """

    scorecard: list[dict[str, str]] | None = None
    vto: VtoBoard | None = None
    issues: list[IssueRow] | None = None
    todos: list[TodoRow] | None = None
    skipped: list[SkippedRow] = field(default_factory=list)

    def is_empty(self) -> bool:
        return (
            self.scorecard is None
            and self.vto is None
            and self.issues is None
            and self.todos is None
        )

    def counts(self) -> dict[str, int]:
        """Number of records per family present in the result."""
        counts: dict[str, int] = {}
        if self.scorecard is not None:
            counts["scorecard"] = len(self.scorecard)
        if self.vto is not None:
            counts["vto"] = sum(len(self.vto.section(name)) for name in VTO_CATEGORIES)
        if self.issues is not None:
            counts["issues"] = len(self.issues)
        if self.todos is not None:
            counts["todos"] = len(self.todos)
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Serialize the present families; absent ones are left out."""
        data: dict[str, Any] = {}
        if self.scorecard is not None:
            data["scorecard"] = [dict(row) for row in self.scorecard]
        if self.vto is not None:
            data["vto"] = self.vto.to_dict()
        if self.issues is not None:
            data["issues"] = [issue.to_dict() for issue in self.issues]
        if self.todos is not None:
            data["todos"] = [todo.to_dict() for todo in self.todos]
        return data


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse(csv_text: str) -> ImportResult:
    """Parse the text of an uploaded CSV file.

    Lines are split on ``\\n`` only; a trailing ``\\r`` is removed by the
    per-field trim. Lines that are blank after trimming are ignored. Each
    remaining line is tokenized with the ``csv`` module, so quoted fields may
    contain commas.

    Raises:
        FormatError: If fewer than two non-blank lines remain.
    """
    numbered = [
        (line_no, line)
        for line_no, line in enumerate(csv_text.split("\n"), start=1)
        if line.strip()
    ]
    if len(numbered) < 2:
        raise FormatError(FORMAT_ERROR_MESSAGE)

    return _classify(
        (line_no, _tokenize(line)) for line_no, line in numbered
    )


def classify_rows(rows: Iterable[Sequence[Any]]) -> ImportResult:
    """Classify already tokenized rows; the first non-blank row is the header.

    Row numbers in ``skipped`` are 1-based positions in ``rows``.

    Raises:
        FormatError: If fewer than two non-blank rows are supplied.
    """
    numbered = [
        (row_no, [str(value) if value is not None else "" for value in row])
        for row_no, row in enumerate(rows, start=1)
    ]
    numbered = [
        (row_no, values) for row_no, values in numbered
        if any(value.strip() for value in values)
    ]
    if len(numbered) < 2:
        raise FormatError(FORMAT_ERROR_MESSAGE)
    return _classify(numbered)


def require_data(result: ImportResult) -> ImportResult:
    """Reject a result that recognized nothing at all.

    Raises:
        EmptyResultError: If no family is present.
    """
    if result.is_empty():
        raise EmptyResultError(NO_DATA_MESSAGE)
    return result


def _tokenize(line: str) -> list[str]:
    """Split one line into fields.

    Falls back to a plain comma split when the ``csv`` reader rejects the
    line (oversized field, stray carriage return inside a field).
    """
    try:
        return next(csv.reader([line], skipinitialspace=True), [])
    except csv.Error:
        return line.split(",")


def _clean(values: Sequence[str]) -> list[str]:
    return [value.strip().replace('"', "") for value in values]


def _classify(numbered_rows: Iterable[tuple[int, Sequence[str]]]) -> ImportResult:
    rows = iter(numbered_rows)
    _, header_values = next(rows)
    header = _clean(header_values)
    result = ImportResult()

    for line_no, raw in rows:
        values = _clean(raw)
        if len(values) < 2:
            result.skipped.append(SkippedRow(line_no, SKIP_SHORT_ROW))
            continue

        kind = values[0].lower()
        record: dict[str, str] = {}
        for name, value in zip(header[1:], values[1:]):
            if name:
                record[name] = value

        _dispatch(result, kind, record, line_no)

    return result


def _dispatch(result: ImportResult, kind: str, record: dict[str, str], line_no: int) -> None:
    if kind == "scorecard":
        if result.scorecard is None:
            result.scorecard = []
        result.scorecard.append(record)

    elif kind == "vto":
        if result.vto is None:
            result.vto = VtoBoard()
        category = (record.get("category") or "objectives").lower()
        if category not in VTO_CATEGORIES:
            result.skipped.append(SkippedRow(line_no, SKIP_UNKNOWN_VTO_CATEGORY))
            return
        result.vto.section(category).append(VtoItem(
            item=_first(record, "item", "title"),
            complete=_is_complete(record.get("complete")),
        ))

    elif kind == "issue":
        if result.issues is None:
            result.issues = []
        result.issues.append(IssueRow(
            title=_first(record, "title"),
            description=_first(record, "description"),
            priority=_first(record, "priority", default="medium"),
            department=_first(record, "department"),
            owner=_first(record, "owner"),
            status=_first(record, "status", default="open"),
            created=_first(record, "created", "createdDate"),
            due=_first(record, "due", "dueDate"),
        ))

    elif kind == "todo":
        if result.todos is None:
            result.todos = []
        result.todos.append(TodoRow(
            title=_first(record, "title"),
            description=_first(record, "description"),
            priority=_first(record, "priority", default="medium"),
            assignee=_first(record, "assignee", "owner"),
            due_date=_first(record, "dueDate", "due"),
            complete=_is_complete(record.get("complete")),
        ))

    else:
        result.skipped.append(SkippedRow(line_no, SKIP_UNKNOWN_TYPE))


def _first(record: dict[str, str], *keys: str, default: str = "") -> str:
    """Return the first non-empty value among ``keys``, else ``default``."""
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return default


def _is_complete(value: str | None) -> bool:
    return value in ("true", "1")
