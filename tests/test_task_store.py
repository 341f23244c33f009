# tests/test_task_store.py

from __future__ import annotations

import sqlite3
from datetime import date
from pathlib import Path

import pytest

from workboard.core.errors import StorageError
from workboard.tasks.task_models import TaskPriority, TaskStatus, TaskType
from workboard.tasks.task_store import TaskStore


@pytest.fixture()
def store(tmp_path: Path) -> TaskStore:
    return TaskStore(tmp_path / "tasks.sqlite3")


def test_add_and_find(store: TaskStore) -> None:
    task = store.add_task(
        code="WB-0001",
        payload={
            "title": "  Fix bug ",
            "assignee": "Alice",
            "priority": "P1",
            "due_date": "2026-10-18",
            "labels": ["backend", "urgent"],
            "task_type": "bug",
            "comments": "ignored",
        },
    )

    assert task.id > 0
    assert task.title == "Fix bug"
    assert task.status == TaskStatus.TODO
    assert task.priority == TaskPriority.P1
    assert task.task_type == TaskType.BUG
    assert task.due_date == date(2026, 10, 18)
    assert task.labels == ["backend", "urgent"]

    assert store.find_by_code("wb-0001") == task
    assert store.find_by_id(task.id) == task
    assert store.count_tasks() == 1


def test_defaults(store: TaskStore) -> None:
    task = store.add_task(code="WB-0001", payload={"title": "Minimal"})
    assert task.status == TaskStatus.TODO
    assert task.priority == TaskPriority.P3
    assert task.task_type == TaskType.TASK
    assert task.due_date is None
    assert task.labels == []


def test_code_is_unique(store: TaskStore) -> None:
    store.add_task(code="WB-0001", payload={"title": "a"})
    with pytest.raises(StorageError):
        store.add_task(code="WB-0001", payload={"title": "b"})


def test_required_fields(store: TaskStore) -> None:
    with pytest.raises(ValueError):
        store.add_task(code="", payload={"title": "a"})
    with pytest.raises(ValueError):
        store.add_task(code="WB-0001", payload={"title": "   "})


def test_partial_update_leaves_other_fields(store: TaskStore) -> None:
    task = store.add_task(code="WB-0001", payload={"title": "a", "assignee": "Alice", "labels": ["x"]})

    updated = store.find_by_id_and_update(task.id, {"status": "in-review", "code": "WB-9999"})

    assert updated is not None
    assert updated.status == TaskStatus.IN_REVIEW
    assert updated.code == "WB-0001"
    assert updated.assignee == "Alice"
    assert updated.labels == ["x"]
    assert updated.updated_at >= task.updated_at


def test_update_validation(store: TaskStore) -> None:
    task = store.add_task(code="WB-0001", payload={"title": "a"})
    with pytest.raises(ValueError):
        store.find_by_id_and_update(task.id, {"title": ""})
    with pytest.raises(ValueError):
        store.find_by_id_and_update(task.id, {"priority": "P0"})
    assert store.find_by_id_and_update(999, {"title": "x"}) is None


def test_delete_returns_removed_snapshot(store: TaskStore) -> None:
    task = store.add_task(code="WB-0001", payload={"title": "a"})
    removed = store.find_by_id_and_delete(task.id)
    assert removed == task
    assert store.find_by_id(task.id) is None
    assert store.find_by_id_and_delete(task.id) is None


def test_find_is_newest_first(store: TaskStore) -> None:
    first = store.add_task(code="WB-0001", payload={"title": "a"})
    second = store.add_task(code="WB-0002", payload={"title": "b"})
    assert [t.id for t in store.find()] == [second.id, first.id]


def test_migration_adds_task_type(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(str(db))
    conn.execute(
        """
        CREATE TABLE tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            code TEXT NOT NULL UNIQUE,
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            assignee TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'todo',
            priority TEXT NOT NULL DEFAULT 'P3',
            due_date TEXT,
            labels TEXT NOT NULL DEFAULT '[]',
            created_at REAL NOT NULL,
            updated_at REAL NOT NULL
        )
        """
    )
    conn.execute("INSERT INTO tasks(code, title, created_at, updated_at) VALUES ('WB-0001', 'legacy', 0, 0)")
    conn.commit()
    conn.close()

    store = TaskStore(db)
    task = store.find_by_code("WB-0001")
    assert task is not None
    assert task.task_type == TaskType.TASK
