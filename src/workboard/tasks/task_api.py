# src/workboard/tasks/task_api.py

"""
Task lifecycle surface used by the CRUD layer.

Each mutation produces exactly one audit entry (none for a no-op update),
then attempts one notification and folds the outcome into that entry.
Storage errors propagate; delivery problems never do.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from ..audit.log import AuditLog
from ..audit.models import SYSTEM_ACTOR, AuditEntry
from ..core.ports import CounterRepo, Directory, ReportConfigSource, TaskRepo
from ..notify.dispatcher import NotificationDispatcher, assignee_resolver, fixed_recipient
from ..notify.models import DeliveryOutcome, NotificationKind
from ..reports.aggregator import DEFAULT_REPORT_DATE_FORMAT, ReportSnapshot, aggregate
from .diff import diff
from .task_models import EDITABLE_FIELDS, TRACKED_FIELDS, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReportRun:
    snapshot: ReportSnapshot
    outcomes: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def sent_count(self) -> int:
        return sum(1 for o in self.outcomes if o.sent)


class LifecycleService:
    def __init__(
        self,
        *,
        tasks: TaskRepo,
        counters: CounterRepo,
        audit: AuditLog,
        dispatcher: NotificationDispatcher,
        directory: Directory,
        report_config: ReportConfigSource,
        report_date_format: str = DEFAULT_REPORT_DATE_FORMAT,
    ) -> None:
        self.tasks = tasks
        self.counters = counters
        self.audit = audit
        self.dispatcher = dispatcher
        self.directory = directory
        self.report_config = report_config
        self.report_date_format = report_date_format

    # ---- hooks called after persistence ----

    def on_task_created(self, task: Task, actor: str = SYSTEM_ACTOR) -> AuditEntry:
        entry = self.audit.record_create(task, actor)
        outcome = self._notify_assignee(NotificationKind.TASK_CREATED, task)
        return self.audit.attach_delivery_outcome(entry, outcome.sent, outcome.target)

    def on_task_updated(
        self,
        task_id: int,
        partial_payload: Mapping[str, Any],
        actor: str = SYSTEM_ACTOR,
        *,
        previous: Task,
    ) -> AuditEntry | None:
        """
        Diff `previous` (snapshot read before the write) against what storage
        now holds for the keys the payload touched, so a value the store
        normalised away is never recorded as a change.

        Returns None for a no-op update: no entry, no notification.
        """
        current = self.tasks.find_by_id(task_id)
        if current is None:
            # Deleted in between: fall back to the payload as sent.
            stored: Mapping[str, Any] = partial_payload
        else:
            snapshot = current.snapshot()
            stored = {k: snapshot[k] for k in partial_payload if k in snapshot}

        changes = diff(previous.snapshot(), stored, TRACKED_FIELDS)
        entry = self.audit.record_change(task_id, changes, actor)
        if entry is None or current is None:
            return entry

        outcome = self._notify_assignee(NotificationKind.TASK_UPDATED, current)
        return self.audit.attach_delivery_outcome(entry, outcome.sent, outcome.target)

    def on_task_deleted(self, task_id: int, actor: str = SYSTEM_ACTOR) -> AuditEntry:
        # Deletes never notify; the entry keeps email_sent = False.
        return self.audit.record_delete(task_id, actor)

    def get_history(self, task_id: int) -> list[AuditEntry]:
        return self.audit.history(task_id)

    # ---- CRUD helpers (persistence + hook) ----

    def create_task(self, payload: Mapping[str, Any], actor: str = SYSTEM_ACTOR) -> tuple[Task, AuditEntry]:
        """
        Issue the code first: if the counter is unavailable the StorageError
        propagates and no task row is written.
        """
        code = self.counters.next_task_code()
        clean = {k: v for k, v in payload.items() if k in EDITABLE_FIELDS}
        task = self.tasks.add_task(code=code, payload=clean)
        logger.info("Task created id=%s code=%s actor=%s", task.id, task.code, actor)
        return task, self.on_task_created(task, actor)

    def update_task(
        self,
        task_id: int,
        payload: Mapping[str, Any],
        actor: str = SYSTEM_ACTOR,
    ) -> tuple[Task, AuditEntry | None] | None:
        previous = self.tasks.find_by_id(task_id)
        if previous is None:
            return None

        clean = {k: v for k, v in payload.items() if k in EDITABLE_FIELDS}
        updated = self.tasks.find_by_id_and_update(task_id, clean)
        if updated is None:
            return None

        entry = self.on_task_updated(task_id, clean, actor, previous=previous)
        logger.info(
            "Task updated id=%s code=%s action=%s",
            task_id,
            updated.code,
            entry.action.value if entry else "noop",
        )
        return updated, entry

    def delete_task(self, task_id: int, actor: str = SYSTEM_ACTOR) -> AuditEntry | None:
        removed = self.tasks.find_by_id_and_delete(task_id)
        if removed is None:
            return None
        logger.info("Task deleted id=%s code=%s actor=%s", task_id, removed.code, actor)
        return self.on_task_deleted(task_id, actor)

    # ---- reports ----

    def build_report(self, as_of: date | datetime | None = None) -> ReportSnapshot:
        if as_of is None:
            as_of = datetime.now().astimezone()
        return aggregate(self.tasks.find(), as_of, date_format=self.report_date_format)

    def run_report_now(
        self,
        recipients: Iterable[str] | None = None,
        *,
        as_of: date | datetime | None = None,
    ) -> ReportRun:
        """
        Aggregate once and mail the snapshot.

        recipients=None sends to every directory entry.
        """
        snapshot = self.build_report(as_of)
        if recipients is None:
            addresses = [e.email for e in self.directory.list_entries() if e.email]
        else:
            addresses = [a for a in recipients if a]

        payload = snapshot.to_payload()
        outcomes = [
            self.dispatcher.dispatch(NotificationKind.DAILY_REPORT, payload, fixed_recipient(address))
            for address in addresses
        ]
        run = ReportRun(snapshot=snapshot, outcomes=outcomes)
        logger.info("Report %s sent to %d/%d recipients", snapshot.date, run.sent_count, len(outcomes))
        return run

    def run_daily_report(self) -> ReportRun | None:
        """Scheduler tick: honour the stored daily-report settings."""
        config = self.report_config.get_daily_report_config()
        if not config.enabled:
            logger.info("Daily report disabled")
            return None
        if config.send_to_all:
            return self.run_report_now(None)
        if not config.recipient_email:
            logger.info("Daily report has no recipient")
            return None
        return self.run_report_now([config.recipient_email])

    # ---- account / transport mails ----

    def send_test_mail(self, address: str) -> DeliveryOutcome:
        return self.dispatcher.dispatch(NotificationKind.TEST, {}, fixed_recipient(address))

    def send_password_mail(self, address: str, name: str, password: str) -> DeliveryOutcome:
        payload = {"email": address, "name": name, "password": password}
        return self.dispatcher.dispatch(NotificationKind.PASSWORD_ISSUED, payload, fixed_recipient(address))

    def _notify_assignee(self, kind: NotificationKind, task: Task) -> DeliveryOutcome:
        return self.dispatcher.dispatch(kind, task.to_payload(), assignee_resolver(self.directory, task.assignee))
