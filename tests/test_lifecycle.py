# tests/test_lifecycle.py

from __future__ import annotations

from datetime import date, timedelta

import pytest

from workboard.audit.models import AuditAction
from workboard.core.errors import StorageError
from workboard.core.state import AppState
from workboard.tasks.task_models import TaskStatus

from .fakes import FakeMailTransport


def test_create_issues_code_and_records_initial_snapshot(state: AppState, transport: FakeMailTransport) -> None:
    tomorrow = date.today() + timedelta(days=1)
    task, entry = state.lifecycle.create_task(
        {"title": "Fix bug", "assignee": "Alice", "due_date": tomorrow.isoformat()},
        "admin",
    )

    assert task.code == "WB-0001"
    assert task.due_date == tomorrow
    assert entry.action == AuditAction.CREATED
    assert entry.actor == "admin"
    assert entry.changes["initial"]["to"]["title"] == "Fix bug"
    assert entry.email_sent is True
    assert entry.email_to == "alice@example.test"
    assert transport.sent[0].subject == "[WB-0001] Task created: Fix bug"

    stored = state.lifecycle.get_history(task.id)
    assert [e.id for e in stored] == [entry.id]
    assert stored[0].email_sent is True


def test_codes_are_sequential(state: AppState) -> None:
    codes = [state.lifecycle.create_task({"title": f"t{i}"})[0].code for i in range(3)]
    assert codes == ["WB-0001", "WB-0002", "WB-0003"]


def test_status_change_is_recorded_and_notified(state: AppState, transport: FakeMailTransport) -> None:
    task, _ = state.lifecycle.create_task({"title": "Fix bug", "assignee": "Alice"})
    before = len(state.lifecycle.get_history(task.id))

    result = state.lifecycle.update_task(task.id, {"status": "done"}, "bob")
    assert result is not None
    updated, entry = result

    assert updated.status == TaskStatus.DONE
    assert entry is not None
    assert entry.action == AuditAction.STATUS_CHANGED
    assert entry.changes == {"status": {"from": "todo", "to": "done"}}
    assert entry.actor == "bob"
    assert entry.email_sent is True
    assert len(state.lifecycle.get_history(task.id)) == before + 1
    assert transport.sent[-1].subject == "[WB-0001] Task updated: Fix bug"


def test_noop_update_writes_nothing_and_sends_nothing(state: AppState, transport: FakeMailTransport) -> None:
    task, _ = state.lifecycle.create_task({"title": "Fix bug", "assignee": "Alice", "labels": ["a", "b"]})
    sent_before = transport.calls

    result = state.lifecycle.update_task(task.id, {"title": "Fix bug", "labels": ["b", "a"]})
    assert result is not None
    _, entry = result

    assert entry is None
    assert len(state.lifecycle.get_history(task.id)) == 1
    assert transport.calls == sent_before


def test_update_notifies_new_assignee(state: AppState, transport: FakeMailTransport) -> None:
    task, _ = state.lifecycle.create_task({"title": "Handover", "assignee": "Alice"})

    result = state.lifecycle.update_task(task.id, {"assignee": "Bob"})
    assert result is not None
    _, entry = result

    assert entry is not None
    assert entry.action == AuditAction.UPDATED
    assert entry.changes["assignee"] == {"from": "Alice", "to": "Bob"}
    assert entry.email_to == "bob@example.test"


def test_update_of_missing_task_returns_none(state: AppState) -> None:
    assert state.lifecycle.update_task(404, {"title": "x"}) is None


def test_delete_records_entry_without_mail(state: AppState, transport: FakeMailTransport) -> None:
    task, _ = state.lifecycle.create_task({"title": "Fix bug", "assignee": "Alice"})
    before = len(state.lifecycle.get_history(task.id))
    sent_before = transport.calls

    entry = state.lifecycle.delete_task(task.id, "admin")

    assert entry is not None
    assert entry.action == AuditAction.DELETED
    assert entry.changes == {}
    assert entry.email_sent is False
    assert transport.calls == sent_before
    assert state.task_store.find_by_id(task.id) is None

    # History outlives the task.
    history = state.lifecycle.get_history(task.id)
    assert len(history) == before + 1
    assert history[0].action == AuditAction.DELETED

    assert state.lifecycle.delete_task(task.id) is None


def test_transport_failure_never_fails_the_mutation(state: AppState, transport: FakeMailTransport) -> None:
    transport.fail = True

    task, entry = state.lifecycle.create_task({"title": "Fix bug", "assignee": "Alice"})

    assert state.task_store.find_by_id(task.id) is not None
    assert entry.email_sent is False
    assert entry.email_to == "alice@example.test"
    assert state.lifecycle.get_history(task.id)[0].email_sent is False


def test_unknown_assignee_keeps_entry_without_target(state: AppState, transport: FakeMailTransport) -> None:
    _, entry = state.lifecycle.create_task({"title": "Orphan", "assignee": "Nobody"})
    assert entry.email_sent is False
    assert entry.email_to is None
    assert transport.calls == 0


def test_counter_failure_writes_no_task(state: AppState) -> None:
    class BrokenCounters:
        def next(self, counter_name: str) -> int:
            raise StorageError("counter store unavailable")

        def next_task_code(self) -> str:
            raise StorageError("counter store unavailable")

    state.lifecycle.counters = BrokenCounters()

    with pytest.raises(StorageError):
        state.lifecycle.create_task({"title": "Fix bug"})
    assert state.task_store.count_tasks() == 0


def test_invalid_payload_is_rejected(state: AppState) -> None:
    with pytest.raises(ValueError):
        state.lifecycle.create_task({"title": ""})
    with pytest.raises(ValueError):
        state.lifecycle.create_task({"title": "x", "status": "blocked"})


def test_hooks_can_be_called_directly(state: AppState) -> None:
    task, _ = state.lifecycle.create_task({"title": "Hooked", "assignee": "Alice"})
    previous = state.task_store.find_by_id(task.id)
    assert previous is not None

    state.task_store.find_by_id_and_update(task.id, {"priority": "P1"})
    entry = state.lifecycle.on_task_updated(task.id, {"priority": "P1"}, "api", previous=previous)

    assert entry is not None
    assert entry.changes == {"priority": {"from": "P3", "to": "P1"}}


def test_run_report_now_sends_one_mail_per_recipient(state: AppState, transport: FakeMailTransport) -> None:
    today = date.today()
    state.lifecycle.create_task({"title": "Late", "due_date": today - timedelta(days=1), "priority": "P1"})
    state.lifecycle.create_task({"title": "Today", "due_date": today})
    sent_before = transport.calls

    run = state.lifecycle.run_report_now(as_of=today)

    assert run.snapshot.total_tasks == 2
    assert run.snapshot.overdue_tasks == 1
    assert run.snapshot.due_today_tasks == 1
    assert run.snapshot.p1_tasks == 1
    assert run.sent_count == 2
    assert {m.to for m in transport.sent[sent_before:]} == {"alice@example.test", "bob@example.test"}


def test_daily_report_honours_settings(state: AppState, transport: FakeMailTransport) -> None:
    run = state.lifecycle.run_daily_report()
    assert run is not None
    assert [o.target for o in run.outcomes] == ["lead@example.test"]

    state.settings_store.update_daily_report_config(send_to_all=True)
    run = state.lifecycle.run_daily_report()
    assert run is not None
    assert len(run.outcomes) == 2

    state.settings_store.update_daily_report_config(enabled=False)
    assert state.lifecycle.run_daily_report() is None


def test_password_and_test_mails(state: AppState, transport: FakeMailTransport) -> None:
    assert state.lifecycle.send_test_mail("ops@example.test").sent is True
    outcome = state.lifecycle.send_password_mail("carol@example.test", "Carol", "pw-123")
    assert outcome.sent is True
    assert outcome.target == "carol@example.test"
    assert "pw-123" in transport.sent[-1].html


def test_update_normalised_by_the_store_is_a_noop(state: AppState, transport: FakeMailTransport) -> None:
    task, _ = state.lifecycle.create_task({"title": "Fix bug", "assignee": "Alice", "labels": ["ops"]})
    sent_before = transport.calls

    # None is stored as "", a bare string label as a one-element list.
    result = state.lifecycle.update_task(task.id, {"description": None, "labels": "ops"})
    assert result is not None
    updated, entry = result

    assert updated.description == ""
    assert updated.labels == ["ops"]
    assert entry is None
    assert len(state.lifecycle.get_history(task.id)) == 1
    assert transport.calls == sent_before


def test_unparseable_due_date_records_what_was_stored(state: AppState) -> None:
    tomorrow = date.today() + timedelta(days=1)
    task, _ = state.lifecycle.create_task({"title": "Fix bug", "due_date": tomorrow})

    result = state.lifecycle.update_task(task.id, {"due_date": "soon"})
    assert result is not None
    updated, entry = result

    assert updated.due_date is None
    assert entry is not None
    assert entry.changes == {"due_date": {"from": tomorrow.isoformat(), "to": None}}

    # Already empty: the same update changes nothing.
    result = state.lifecycle.update_task(task.id, {"due_date": "soon"})
    assert result is not None
    assert result[1] is None


def test_bad_sender_header_never_fails_the_mutation(state: AppState, transport: FakeMailTransport) -> None:
    state.settings_store.update_smtp_config(from_name="Work\nboard")

    task, entry = state.lifecycle.create_task({"title": "Fix bug", "assignee": "Alice"})

    assert state.task_store.find_by_id(task.id) is not None
    assert entry.email_sent is False
    assert entry.email_to == "alice@example.test"
    assert transport.calls == 0
