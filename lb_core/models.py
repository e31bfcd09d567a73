"""Task and dependency records as reported by the beads tracker (``bd list --json``).

The tracker owns these objects. The TUI only reads them and issues
mutation requests through :mod:`lb_core.beads`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

STATUS_OPEN = "open"
STATUS_IN_PROGRESS = "in_progress"
STATUS_CLOSED = "closed"
STATUSES = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_CLOSED)

TASK_TYPES = ("task", "bug", "feature", "epic", "chore")

STATUS_ICONS = {
    STATUS_OPEN: "○",
    STATUS_IN_PROGRESS: "◐",
    STATUS_CLOSED: "●",
}

# bd emits RFC 3339 with 1 to 9 fractional digits; fromisoformat on 3.10
# only takes 3 or 6.
_FRACTION_RE = re.compile(r"\.(\d+)")


def _six_digit_fraction(m: re.Match) -> str:
    return "." + m.group(1)[:6].ljust(6, "0")


def _parse_time(value) -> datetime | None:
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(_six_digit_fraction, text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parent_id_from_id(task_id: str) -> str:
    """Derive the parent ID from dot notation (``bd-42.3`` -> ``bd-42``)."""
    if "." not in task_id:
        return ""
    return task_id.rsplit(".", 1)[0]


@dataclass(frozen=True)
class Dependency:
    """Directed relation: ``issue_id`` depends on ``depends_on_id``."""

    issue_id: str
    depends_on_id: str
    type: str = ""

    def is_parent_child(self) -> bool:
        # Matches both "parent-child" and "parent"
        return self.type.startswith("parent")

    @classmethod
    def from_dict(cls, raw: dict) -> Dependency:
        return cls(
            issue_id=raw.get("issue_id", ""),
            depends_on_id=raw.get("depends_on_id", ""),
            type=raw.get("type", ""),
        )


@dataclass
class Task:
    """A beads issue."""

    id: str
    title: str = ""
    status: str = STATUS_OPEN
    priority: int = 2
    type: str = "task"
    description: str = ""
    notes: str = ""
    design: str = ""
    acceptance_criteria: str = ""
    labels: list[str] = field(default_factory=list)
    assignee: str = ""
    owner: str = ""
    created_at: datetime | None = None
    created_by: str = ""
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    close_reason: str = ""
    due_date: datetime | None = None
    defer_until: datetime | None = None
    blocked_by: list[str] = field(default_factory=list)
    blocks: list[str] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    dependency_count: int = 0
    dependent_count: int = 0
    parent: str = ""

    @classmethod
    def from_dict(cls, raw: dict) -> Task:
        """Build a Task from one element of ``bd list --json`` output."""
        try:
            priority = int(raw.get("priority", 2))
        except (TypeError, ValueError):
            priority = 2
        return cls(
            id=raw["id"],
            title=raw.get("title", ""),
            status=raw.get("status", STATUS_OPEN),
            priority=priority,
            type=raw.get("issue_type", "task"),
            description=raw.get("description") or "",
            notes=raw.get("notes") or "",
            design=raw.get("design") or "",
            acceptance_criteria=raw.get("acceptance_criteria") or "",
            labels=list(raw.get("labels") or []),
            assignee=raw.get("assignee") or "",
            owner=raw.get("owner") or "",
            created_at=_parse_time(raw.get("created_at")),
            created_by=raw.get("created_by") or "",
            updated_at=_parse_time(raw.get("updated_at")),
            closed_at=_parse_time(raw.get("closed_at")),
            close_reason=raw.get("close_reason") or "",
            due_date=_parse_time(raw.get("due_date")),
            defer_until=_parse_time(raw.get("defer_until")),
            blocked_by=list(raw.get("blocked_by") or []),
            blocks=list(raw.get("blocks") or []),
            dependencies=[Dependency.from_dict(d) for d in raw.get("dependencies") or []],
            dependency_count=raw.get("dependency_count") or 0,
            dependent_count=raw.get("dependent_count") or 0,
            parent=raw.get("parent") or "",
        )

    def priority_string(self) -> str:
        if 0 <= self.priority <= 4:
            return f"P{self.priority}"
        return "P?"

    def status_icon(self) -> str:
        return STATUS_ICONS.get(self.status, "?")

    def is_blocked(self) -> bool:
        return len(self.blocked_by) > 0

    def parent_id(self) -> str:
        """Return the parent task ID.

        Uses the embedded parent when the tracker provides one, then the
        first parent-child dependency, then the dot-notation convention.
        """
        if self.parent:
            return self.parent
        for dep in self.dependencies:
            if dep.is_parent_child():
                return dep.depends_on_id
        return parent_id_from_id(self.id)

    def file_path(self) -> Path:
        """Path to the task's markdown file inside the beads directory."""
        return Path(".beads") / "issues" / f"{self.id}.md"
