# src/workboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    IN_REVIEW = "in-review"
    DONE = "done"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(raw)
        except Exception:
            return cls.TODO


class TaskPriority(StrEnum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.P3
        try:
            return cls(raw)
        except Exception:
            return cls.P3


class TaskType(StrEnum):
    TASK = "task"
    BUG = "bug"
    INCIDENT = "incident"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"
    OTHER = "other"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskType:
        if not raw:
            return cls.TASK
        try:
            return cls(raw)
        except Exception:
            return cls.TASK


# Fields eligible for diffing and audit recording. Shared by the diff engine
# and the audit log; the order here is the order of keys in recorded changes.
TRACKED_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "assignee",
    "status",
    "priority",
    "due_date",
    "labels",
)

# Fields a create/update payload may carry (everything else is ignored).
EDITABLE_FIELDS: tuple[str, ...] = TRACKED_FIELDS + ("task_type",)


def parse_due_date(raw: Any) -> date | None:
    """Accept a date, a datetime or an ISO string; anything else means "no due date"."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


@dataclass(slots=True)
class Task:
    id: int
    code: str
    title: str
    description: str
    assignee: str
    status: TaskStatus
    priority: TaskPriority
    due_date: date | None
    labels: list[str] = field(default_factory=list)
    task_type: TaskType = TaskType.TASK
    created_at: float = 0.0
    updated_at: float = 0.0

    def snapshot(self) -> dict[str, Any]:
        """Point-in-time read of the editable fields (diff input)."""
        return {
            "title": self.title,
            "description": self.description,
            "assignee": self.assignee,
            "status": self.status,
            "priority": self.priority,
            "due_date": self.due_date,
            "labels": list(self.labels),
            "task_type": self.task_type,
        }

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe form of the task, used in audit entries and templates."""
        return {
            "id": self.id,
            "code": self.code,
            "title": self.title,
            "description": self.description,
            "assignee": self.assignee,
            "status": self.status.value,
            "priority": self.priority.value,
            "task_type": self.task_type.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "labels": list(self.labels),
        }
