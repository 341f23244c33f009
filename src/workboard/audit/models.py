# src/workboard/audit/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

SYSTEM_ACTOR = "System"


class AuditAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """
    One lifecycle event of one task.

    `task_id` is a value back-reference; tasks never point at their entries.
    Only `email_sent` / `email_to` are ever written after the insert.
    """

    id: int
    task_id: int
    action: AuditAction
    changes: dict[str, Any] = field(default_factory=dict)
    actor: str = SYSTEM_ACTOR
    performed_at: float = 0.0
    email_sent: bool = False
    email_to: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "action": self.action.value,
            "changes": self.changes,
            "actor": self.actor,
            "performed_at": self.performed_at,
            "email_sent": self.email_sent,
            "email_to": self.email_to,
        }
