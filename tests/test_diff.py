# tests/test_diff.py

from __future__ import annotations

from datetime import date, datetime

from workboard.tasks.diff import classify, diff, to_plain
from workboard.tasks.task_models import TaskPriority, TaskStatus


def _old() -> dict:
    return {
        "title": "Fix bug",
        "description": "",
        "assignee": "Alice",
        "status": TaskStatus.TODO,
        "priority": TaskPriority.P3,
        "due_date": date(2026, 10, 18),
        "labels": ["backend", "urgent"],
    }


def test_identical_snapshot_has_no_changes() -> None:
    old = _old()
    assert diff(old, dict(old)) == {}


def test_fields_missing_from_payload_are_unchanged() -> None:
    assert diff(_old(), {}) == {}
    assert diff(_old(), {"title": "Fix bug"}) == {}


def test_status_change_is_reported_with_plain_values() -> None:
    changes = diff(_old(), {"status": "done"})
    assert changes == {"status": {"from": "todo", "to": "done"}}


def test_enum_and_string_values_compare_equal() -> None:
    assert diff(_old(), {"status": TaskStatus.TODO, "priority": "P3"}) == {}


def test_label_order_and_duplicates_are_ignored() -> None:
    assert diff(_old(), {"labels": ["urgent", "backend", "urgent"]}) == {}
    changes = diff(_old(), {"labels": ["backend"]})
    assert changes == {"labels": {"from": ["backend", "urgent"], "to": ["backend"]}}


def test_due_date_string_and_datetime_match_date() -> None:
    assert diff(_old(), {"due_date": "2026-10-18"}) == {}
    assert diff(_old(), {"due_date": datetime(2026, 10, 18, 9, 30)}) == {}
    changes = diff(_old(), {"due_date": None})
    assert changes == {"due_date": {"from": "2026-10-18", "to": None}}


def test_untracked_keys_are_ignored() -> None:
    assert diff(_old(), {"comments": ["hi"], "task_type": "bug", "id": 99}) == {}


def test_several_fields_at_once() -> None:
    changes = diff(_old(), {"title": "Fix the bug", "assignee": "Bob", "status": "in-progress"})
    assert set(changes) == {"title", "assignee", "status"}
    assert changes["assignee"] == {"from": "Alice", "to": "Bob"}


def test_classify_prefers_status() -> None:
    assert classify({"status": {}, "title": {}}) == "status_changed"
    assert classify({"title": {}}) == "updated"


def test_to_plain_handles_nested_values() -> None:
    assert to_plain({"s": TaskStatus.DONE, "d": date(2026, 1, 2), "l": {"b", "a"}}) == {
        "s": "done",
        "d": "2026-01-02",
        "l": ["a", "b"],
    }
