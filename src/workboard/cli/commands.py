# src/workboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from datetime import datetime
from typing import Any, cast

from ..audit.models import AuditEntry
from ..core.errors import StorageError
from ..core.state import AppState
from ..tasks.task_models import EDITABLE_FIELDS, Task

CommandEmitter = Callable[[str], None]
CommandHandler3 = Callable[[AppState, list[str], str], str]
CommandHandler4 = Callable[[AppState, list[str], str, CommandEmitter | None], str]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)

_FIELD_ALIASES = {
    "due": "due_date",
    "type": "task_type",
    "desc": "description",
}


class CommandRegistry:
    """Simple slash-command registry used by the admin console (/help, /report, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        actor: str = "System",
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 4

        try:
            if nparams >= 4:
                h4 = cast(CommandHandler4, handler)
                return h4(state, args, actor, emit)
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, actor)
        except StorageError as exc:
            logger.error("Command /%s failed: %s", name, exc)
            return f"Storage unavailable: {exc}"
        except ValueError as exc:
            return f"Invalid input: {exc}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _ts_local(ts: float) -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M:%S")


def parse_fields(tokens: list[str]) -> tuple[dict[str, Any], list[str]]:
    """
    Split `key=value` tokens from free words.

    labels are comma separated; unknown keys are rejected so typos are visible.
    """
    fields: dict[str, Any] = {}
    words: list[str] = []
    for tok in tokens:
        if "=" not in tok:
            words.append(tok)
            continue
        key, _, value = tok.partition("=")
        key = _FIELD_ALIASES.get(key.strip().lower(), key.strip().lower())
        if key not in EDITABLE_FIELDS:
            raise ValueError(f"unknown field {key!r}")
        if key == "labels":
            fields[key] = [v.strip() for v in value.split(",") if v.strip()]
        else:
            fields[key] = value
    return fields, words


def _find_task(state: AppState, ref: str) -> Task | None:
    if ref.isdigit():
        return state.task_store.find_by_id(int(ref))
    return state.task_store.find_by_code(ref)


def _delivery(entry: AuditEntry | None) -> str:
    if entry is None:
        return "no changes recorded"
    if entry.email_sent:
        return f"notified {entry.email_to}"
    return "notification not sent"


def _format_task(task: Task) -> str:
    due = task.due_date.isoformat() if task.due_date else "-"
    labels = ", ".join(task.labels) or "-"
    return (
        f"{task.code} (id={task.id}) {task.title}\n"
        f"  status={task.status.value} priority={task.priority.value} type={task.task_type.value}\n"
        f"  assignee={task.assignee or '-'} due={due} labels={labels}"
    )


def cmd_help(state: AppState, args: list[str], actor: str) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], actor: str) -> str:
    smtp = state.settings_store.get_smtp_config()
    report = state.settings_store.get_daily_report_config()
    target = "all directory entries" if report.send_to_all else (report.recipient_email or "-")
    return (
        "Status:\n"
        f"  Tasks: {state.task_store.count_tasks()}\n"
        f"  Directory entries: {len(state.directory.list_entries())}\n"
        f"  SMTP: {'configured (' + smtp.host + ')' if smtp.is_configured else 'not configured'}\n"
        f"  Daily report: {'ON' if report.enabled else 'OFF'} -> {target}"
    )


def cmd_task(state: AppState, args: list[str], actor: str) -> str:
    """
    /task add <title words> [assignee=.. due=YYYY-MM-DD priority=P1 status=todo labels=a,b type=bug]
    /task set <code|id> field=value ...
    /task rm <code|id>
    /task show <code|id>
    """
    if not args:
        return (cmd_task.__doc__ or "").strip()

    sub = args[0].lower()
    rest = args[1:]
    svc = state.lifecycle

    if sub == "add":
        fields, words = parse_fields(rest)
        if words:
            fields["title"] = " ".join(words)
        task, entry = svc.create_task(fields, actor)
        return f"Created {task.code}: {task.title} ({_delivery(entry)})"

    if not rest:
        return f"Usage: /task {sub} <code|id> ..."

    task = _find_task(state, rest[0])
    if task is None:
        return f"Task not found: {rest[0]}"

    if sub == "show":
        return _format_task(task)

    if sub == "set":
        fields, _ = parse_fields(rest[1:])
        if not fields:
            return "Nothing to update. Use field=value pairs."
        result = svc.update_task(task.id, fields, actor)
        if result is None:
            return f"Task not found: {rest[0]}"
        updated, entry = result
        action = entry.action.value if entry else "unchanged"
        return f"{updated.code} {action} ({_delivery(entry)})"

    if sub in ("rm", "delete"):
        entry = svc.delete_task(task.id, actor)
        if entry is None:
            return f"Task not found: {rest[0]}"
        return f"Deleted {task.code}"

    return f"Unknown /task subcommand: {sub}"


def cmd_history(state: AppState, args: list[str], actor: str) -> str:
    if not args:
        return "Usage: /history <code|id>"

    ref = args[0]
    task = _find_task(state, ref)
    if task is not None:
        task_id = task.id
    elif ref.isdigit():
        # Deleted tasks keep their history under the numeric id.
        task_id = int(ref)
    else:
        return f"Task not found: {ref}"

    entries = state.lifecycle.get_history(task_id)
    if not entries:
        return f"No history for {ref}."

    lines = [f"History for {ref} (most recent first):"]
    for e in entries:
        fields = ", ".join(k for k in e.changes if k != "initial") or "-"
        mail = f"mail -> {e.email_to}" if e.email_sent else "no mail"
        lines.append(f"  [{_ts_local(e.performed_at)}] {e.action.value} by {e.actor}: {fields} ({mail})")
    return "\n".join(lines)


def cmd_report(state: AppState, args: list[str], actor: str, emit: CommandEmitter | None = None) -> str:
    """
    /report            -> send to the configured daily-report recipient
    /report all        -> send to every directory entry
    /report <email>... -> send to explicit addresses
    """
    if emit:
        emit("[REPORT] Aggregating and sending...")

    svc = state.lifecycle
    if not args:
        run = svc.run_daily_report()
        if run is None:
            return "Daily report is disabled or has no recipient."
    elif args[0].lower() == "all":
        run = svc.run_report_now(None)
    else:
        run = svc.run_report_now(args)

    s = run.snapshot
    return (
        f"Report {s.date}: total={s.total_tasks} todo={s.todo_tasks} in-progress={s.in_progress_tasks} "
        f"in-review={s.in_review_tasks} done={s.done_tasks} overdue={s.overdue_tasks} "
        f"due-today={s.due_today_tasks} p1={s.p1_tasks} p2={s.p2_tasks}\n"
        f"Sent to {run.sent_count}/{len(run.outcomes)} recipients."
    )


def cmd_testmail(state: AppState, args: list[str], actor: str) -> str:
    if not args:
        return "Usage: /testmail <email>"
    outcome = state.lifecycle.send_test_mail(args[0])
    return "Test email sent." if outcome.sent else "Test email NOT sent (check SMTP settings and logs)."


def cmd_people(state: AppState, args: list[str], actor: str) -> str:
    """
    /people                      -> list directory
    /people add <email> <name..> -> add or rename an entry
    /people rm <email>           -> remove an entry
    """
    if not args:
        entries = state.directory.list_entries()
        if not entries:
            return "Directory is empty."
        return "\n".join(["Directory:"] + [f"  {e.name} <{e.email}>" for e in entries])

    sub = args[0].lower()
    if sub == "add" and len(args) >= 3:
        entry = state.directory.add_entry(" ".join(args[2:]), args[1])
        return f"Saved {entry.name} <{entry.email}>"
    if sub == "rm" and len(args) == 2:
        return "Removed." if state.directory.remove_entry(args[1]) else "No such entry."
    return (cmd_people.__doc__ or "").strip()


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task count, SMTP and daily report settings.")
registry.register("task", cmd_task, help_text="Tasks: /task add | set | rm | show.", aliases=["t"])
registry.register("history", cmd_history, help_text="Audit trail of a task: /history <code|id>.")
registry.register("report", cmd_report, help_text="Send the task report now: /report [all|<email>...].")
registry.register("testmail", cmd_testmail, help_text="Send a test email: /testmail <email>.")
registry.register("people", cmd_people, help_text="Directory: /people | /people add <email> <name> | /people rm <email>.")
