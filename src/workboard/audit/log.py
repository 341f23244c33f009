# src/workboard/audit/log.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ..core.ports import AuditRepo
from ..tasks.diff import classify
from ..tasks.task_models import TRACKED_FIELDS, Task
from .models import SYSTEM_ACTOR, AuditAction, AuditEntry

logger = logging.getLogger(__name__)


class AuditLog:
    """
    Lifecycle events on top of an append-only AuditRepo.

    Every entry is written with `email_sent = False`; the dispatcher's outcome
    is attached afterwards, so a failed delivery still leaves the entry behind.
    """

    def __init__(self, repo: AuditRepo, *, tracked_fields: tuple[str, ...] = TRACKED_FIELDS) -> None:
        self._repo = repo
        self._tracked = frozenset(tracked_fields)

    def record_create(self, task: Task, actor: str = SYSTEM_ACTOR) -> AuditEntry:
        return self._repo.append(
            task_id=task.id,
            action=AuditAction.CREATED,
            changes={"initial": {"from": None, "to": task.to_payload()}},
            actor=actor or SYSTEM_ACTOR,
        )

    def record_change(
        self,
        task_id: int,
        diff_result: Mapping[str, Any],
        actor: str = SYSTEM_ACTOR,
    ) -> AuditEntry | None:
        """Write an `updated` / `status_changed` entry, or nothing for an empty diff."""
        changes = {k: dict(v) for k, v in diff_result.items() if k in self._tracked}
        if not changes:
            logger.debug("No tracked changes for task_id=%s; no audit entry", task_id)
            return None

        return self._repo.append(
            task_id=task_id,
            action=AuditAction(classify(changes)),
            changes=changes,
            actor=actor or SYSTEM_ACTOR,
        )

    def record_delete(self, task_id: int, actor: str = SYSTEM_ACTOR) -> AuditEntry:
        return self._repo.append(
            task_id=task_id,
            action=AuditAction.DELETED,
            changes={},
            actor=actor or SYSTEM_ACTOR,
        )

    def attach_delivery_outcome(self, entry: AuditEntry, sent: bool, target: str | None) -> AuditEntry:
        """Fold a delivery outcome into an existing entry. Same values twice is a no-op."""
        if entry.email_sent == bool(sent) and entry.email_to == target:
            return entry
        changed = self._repo.set_delivery(entry.id, sent=bool(sent), target=target)
        if changed:
            logger.debug("Audit entry id=%s delivery sent=%s to=%s", entry.id, sent, target)
        return replace(entry, email_sent=bool(sent), email_to=target)

    def history(self, task_id: int) -> list[AuditEntry]:
        return self._repo.list_for_task(task_id)
