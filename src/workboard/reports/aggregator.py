# src/workboard/reports/aggregator.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any

from ..tasks.task_models import Task, TaskPriority, TaskStatus

DEFAULT_REPORT_DATE_FORMAT = "%A, %d %B %Y"


@dataclass(frozen=True, slots=True)
class ReportSnapshot:
    date: str
    total_tasks: int
    todo_tasks: int
    in_progress_tasks: int
    in_review_tasks: int
    done_tasks: int
    overdue_tasks: int
    due_today_tasks: int
    p1_tasks: int
    p2_tasks: int

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


def aggregate(
    tasks: Iterable[Task],
    as_of: date | datetime,
    *,
    date_format: str = DEFAULT_REPORT_DATE_FORMAT,
) -> ReportSnapshot:
    """
    Status / priority / due-date rollup as of a given day.

    - statuses partition the task set exactly
    - overdue: not done and due before today
    - due today: due today whatever the status (a done task still counts)
    - p1 / p2: priority match and not done
    Tasks without a due date are neither overdue nor due today.
    The only clock is `as_of`.
    """
    today = as_of.date() if isinstance(as_of, datetime) else as_of

    by_status = {s: 0 for s in TaskStatus}
    total = overdue = due_today = p1 = p2 = 0

    for t in tasks:
        total += 1
        by_status[t.status] += 1
        done = t.status == TaskStatus.DONE

        if t.due_date is not None:
            if not done and t.due_date < today:
                overdue += 1
            if t.due_date == today:
                due_today += 1

        if not done and t.priority == TaskPriority.P1:
            p1 += 1
        if not done and t.priority == TaskPriority.P2:
            p2 += 1

    return ReportSnapshot(
        date=today.strftime(date_format),
        total_tasks=total,
        todo_tasks=by_status[TaskStatus.TODO],
        in_progress_tasks=by_status[TaskStatus.IN_PROGRESS],
        in_review_tasks=by_status[TaskStatus.IN_REVIEW],
        done_tasks=by_status[TaskStatus.DONE],
        overdue_tasks=overdue,
        due_today_tasks=due_today,
        p1_tasks=p1,
        p2_tasks=p2,
    )
