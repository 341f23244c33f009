# tests/test_report_aggregator.py

from __future__ import annotations

from datetime import date, datetime, timedelta

from workboard.reports.aggregator import aggregate
from workboard.tasks.task_models import Task, TaskPriority, TaskStatus

TODAY = date(2026, 10, 17)
YESTERDAY = TODAY - timedelta(days=1)
TOMORROW = TODAY + timedelta(days=1)

_next_id = iter(range(1, 1000))


def _task(status: TaskStatus, priority: TaskPriority = TaskPriority.P3, due: date | None = None) -> Task:
    task_id = next(_next_id)
    return Task(
        id=task_id,
        code=f"WB-{task_id:04d}",
        title=f"task {task_id}",
        description="",
        assignee="",
        status=status,
        priority=priority,
        due_date=due,
    )


def _ten_tasks() -> list[Task]:
    return [
        _task(TaskStatus.TODO, TaskPriority.P1, YESTERDAY),  # overdue, p1
        _task(TaskStatus.IN_PROGRESS, TaskPriority.P2, YESTERDAY),  # overdue, p2
        _task(TaskStatus.DONE, TaskPriority.P1, YESTERDAY),  # done: neither overdue nor p1
        _task(TaskStatus.TODO, TaskPriority.P1, TODAY),  # due today, p1
        _task(TaskStatus.TODO, TaskPriority.P3, TOMORROW),
        _task(TaskStatus.IN_REVIEW, TaskPriority.P4),
        _task(TaskStatus.DONE, TaskPriority.P2),
        _task(TaskStatus.DONE, TaskPriority.P3, TOMORROW),
        _task(TaskStatus.TODO, TaskPriority.P3),
        _task(TaskStatus.IN_PROGRESS, TaskPriority.P4, TOMORROW),
    ]


def test_ten_task_rollup() -> None:
    snap = aggregate(_ten_tasks(), TODAY)

    assert snap.total_tasks == 10
    assert snap.todo_tasks == 4
    assert snap.in_progress_tasks == 2
    assert snap.in_review_tasks == 1
    assert snap.done_tasks == 3
    assert snap.overdue_tasks == 2
    assert snap.due_today_tasks == 1
    assert snap.p1_tasks == 2
    assert snap.p2_tasks == 1


def test_statuses_partition_the_total() -> None:
    snap = aggregate(_ten_tasks(), TODAY)
    assert snap.todo_tasks + snap.in_progress_tasks + snap.in_review_tasks + snap.done_tasks == snap.total_tasks


def test_done_task_due_today_still_counts_as_due_today() -> None:
    snap = aggregate([_task(TaskStatus.DONE, due=TODAY)], TODAY)
    assert snap.due_today_tasks == 1
    assert snap.overdue_tasks == 0


def test_empty_board() -> None:
    snap = aggregate([], TODAY)
    assert snap.total_tasks == 0
    assert snap.overdue_tasks == 0
    assert snap.p1_tasks == 0


def test_same_input_same_snapshot() -> None:
    tasks = _ten_tasks()
    assert aggregate(tasks, TODAY) == aggregate(tasks, TODAY)


def test_datetime_as_of_uses_its_day_and_formats_date() -> None:
    snap = aggregate(_ten_tasks(), datetime(2026, 10, 17, 23, 59))
    assert snap.due_today_tasks == 1
    assert snap.date == "Saturday, 17 October 2026"
    assert aggregate([], TODAY, date_format="%Y-%m-%d").date == "2026-10-17"


def test_payload_has_every_counter() -> None:
    payload = aggregate(_ten_tasks(), TODAY).to_payload()
    assert payload["total_tasks"] == 10
    assert set(payload) >= {"date", "overdue_tasks", "due_today_tasks", "p1_tasks", "p2_tasks"}
