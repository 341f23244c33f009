# src/workboard/notify/renderer.py

"""
Notification message rendering.

Each kind has one fixed layout (header, key/value table, call-to-action link)
filled from payload fields. Templates live inline and are rendered with Jinja2
(HTML autoescaping on); missing values fall back to literal placeholders.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from jinja2 import DictLoader, Environment, StrictUndefined, select_autoescape

from ..tasks.task_models import parse_due_date
from .models import NotificationKind, RenderedMessage

STATUS_COLORS: dict[str, str] = {
    "todo": "#9e9e9e",
    "in-progress": "#1976d2",
    "in-review": "#9c27b0",
    "done": "#2e7d32",
}

PRIORITY_COLORS: dict[str, str] = {
    "P1": "#d32f2f",
    "P2": "#f57c00",
    "P3": "#fbc02d",
    "P4": "#388e3c",
}

_DEFAULT_STATUS_COLOR = STATUS_COLORS["todo"]
_DEFAULT_PRIORITY_COLOR = PRIORITY_COLORS["P3"]

_BASE = """\
<!doctype html>
<html>
<head><meta charset="utf-8"><title>{% block title %}{% endblock %}</title></head>
<body style="margin:0;background:#f5f5f5;font-family:Inter,Arial,sans-serif;font-size:14px;line-height:1.5;color:#333333;">
  <div style="background:#1976d2;padding:20px;text-align:center;">
    <span style="font-size:24px;color:#ffffff;font-weight:bold;">{{ app_name }}</span>
  </div>
  <div style="background:#ffffff;padding:30px;max-width:600px;margin:0 auto;">
    <div style="font-size:20px;font-weight:bold;">{% block heading %}{% endblock %}</div>
    {% block body %}{% endblock %}
    <hr style="border:none;border-top:1px solid #e0e0e0;">
    <a href="{% block cta_href %}{{ public_url }}{% endblock %}"
       style="display:inline-block;background:#1976d2;color:#ffffff;padding:10px 24px;border-radius:4px;text-decoration:none;">
      {% block cta_label %}Open {{ app_name }}{% endblock %}
    </a>
  </div>
  <div style="padding:20px;text-align:center;font-size:12px;color:#999999;">
    Automated notification from {{ app_name }}
  </div>
</body>
</html>
"""

_TASK = """\
{% extends "base.html" %}
{% block title %}Task {{ verb }}: {{ task.title }}{% endblock %}
{% block heading %}{{ heading }}{% endblock %}
{% block body %}
<div style="font-size:12px;color:#666666;">{{ task.code | default("", true) }}</div>
<hr style="border:none;border-top:1px solid #e0e0e0;">
<div style="font-size:18px;font-weight:600;">{{ task.title }}</div>
<div style="color:#666666;">{{ task.description | default("No description", true) }}</div>
<table style="width:100%;">
  <tr>
    <td style="padding:8px 0;width:120px;color:#666;">Status:</td>
    <td style="padding:8px 0;"><span style="background:{{ task.status | status_color }}22;color:{{ task.status | status_color }};padding:4px 12px;border-radius:16px;font-size:12px;">{{ task.status | status_label }}</span></td>
  </tr>
  <tr>
    <td style="padding:8px 0;color:#666;">Priority:</td>
    <td style="padding:8px 0;"><span style="background:{{ task.priority | priority_color }}22;color:{{ task.priority | priority_color }};padding:4px 12px;border-radius:16px;font-size:12px;">{{ task.priority | default("P3", true) }}</span></td>
  </tr>
  <tr>
    <td style="padding:8px 0;color:#666;">Type:</td>
    <td style="padding:8px 0;font-weight:500;">{{ task.task_type | default("task", true) | capitalize }}</td>
  </tr>
  <tr>
    <td style="padding:8px 0;color:#666;">Assignee:</td>
    <td style="padding:8px 0;font-weight:500;">{{ task.assignee | default("Unassigned", true) }}</td>
  </tr>
  <tr>
    <td style="padding:8px 0;color:#666;">Due Date:</td>
    <td style="padding:8px 0;">{{ task.due_date | fmt_date }}</td>
  </tr>
</table>
{% endblock %}
{% block cta_href %}{{ public_url }}/tasks/{{ task.id | default("", true) }}{% endblock %}
{% block cta_label %}View Task in {{ app_name }}{% endblock %}
"""

_PASSWORD = """\
{% extends "base.html" %}
{% block title %}Welcome to {{ app_name }}{% endblock %}
{% block heading %}Welcome to {{ app_name }}!{% endblock %}
{% block body %}
<p>Hello {{ name | default("there", true) }},</p>
<p>Your account has been created. Here are your login credentials:</p>
<table style="width:100%;">
  <tr>
    <td style="padding:8px 0;width:120px;color:#666;">Email:</td>
    <td style="padding:8px 0;font-weight:500;">{{ email | default("", true) }}</td>
  </tr>
  <tr>
    <td style="padding:8px 0;color:#666;">Password:</td>
    <td style="padding:4px 8px;font-weight:500;font-family:monospace;background:#f5f5f5;">{{ password | default("", true) }}</td>
  </tr>
</table>
<p style="color:#999999;font-size:12px;">Please change your password after your first login for security.</p>
{% endblock %}
{% block cta_label %}Login to {{ app_name }}{% endblock %}
"""

_TEST = """\
{% extends "base.html" %}
{% block title %}Test Email{% endblock %}
{% block heading %}Test Email{% endblock %}
{% block body %}
<p>Your SMTP configuration is working correctly!</p>
{% endblock %}
"""

_REPORT = """\
{% extends "base.html" %}
{% block title %}Daily Task Report - {{ date }}{% endblock %}
{% block heading %}Daily Task Report{% endblock %}
{% block body %}
<div style="color:#666666;">{{ date }}</div>
<table style="width:100%;">
  <tr style="background:#e3f2fd;">
    <td style="padding:12px;font-size:16px;font-weight:bold;">Total Tasks</td>
    <td style="padding:12px;font-size:18px;font-weight:bold;text-align:right;">{{ total_tasks }}</td>
  </tr>
</table>
<div style="font-weight:bold;padding-top:12px;">Status Breakdown</div>
<table style="width:100%;">
  <tr><td style="padding:8px 0;">To Do</td><td style="padding:8px 0;text-align:right;font-weight:500;color:{{ status_colors['todo'] }};">{{ todo_tasks }}</td></tr>
  <tr><td style="padding:8px 0;">In Progress</td><td style="padding:8px 0;text-align:right;font-weight:500;color:{{ status_colors['in-progress'] }};">{{ in_progress_tasks }}</td></tr>
  <tr><td style="padding:8px 0;">In Review</td><td style="padding:8px 0;text-align:right;font-weight:500;color:{{ status_colors['in-review'] }};">{{ in_review_tasks }}</td></tr>
  <tr><td style="padding:8px 0;">Done</td><td style="padding:8px 0;text-align:right;font-weight:500;color:{{ status_colors['done'] }};">{{ done_tasks }}</td></tr>
</table>
<div style="font-weight:bold;padding-top:12px;">Attention Required</div>
<table style="width:100%;">
  <tr style="background:{{ '#ffebee' if overdue_tasks > 0 else '#fff' }};"><td style="padding:8px 0;">Overdue</td><td style="padding:8px 0;text-align:right;font-weight:bold;color:#d32f2f;">{{ overdue_tasks }}</td></tr>
  <tr style="background:{{ '#fff3e0' if due_today_tasks > 0 else '#fff' }};"><td style="padding:8px 0;">Due Today</td><td style="padding:8px 0;text-align:right;font-weight:bold;color:#f57c00;">{{ due_today_tasks }}</td></tr>
</table>
<div style="font-weight:bold;padding-top:12px;">High Priority (Pending)</div>
<table style="width:100%;">
  <tr><td style="padding:8px 0;color:{{ priority_colors['P1'] }};">P1 - Critical</td><td style="padding:8px 0;text-align:right;font-weight:bold;">{{ p1_tasks }}</td></tr>
  <tr><td style="padding:8px 0;color:{{ priority_colors['P2'] }};">P2 - High</td><td style="padding:8px 0;text-align:right;font-weight:bold;">{{ p2_tasks }}</td></tr>
</table>
{% endblock %}
{% block cta_label %}Open {{ app_name }}{% endblock %}
"""

_TEMPLATES = {
    "base.html": _BASE,
    NotificationKind.TASK_CREATED.value: _TASK,
    NotificationKind.TASK_UPDATED.value: _TASK,
    NotificationKind.PASSWORD_ISSUED.value: _PASSWORD,
    NotificationKind.TEST.value: _TEST,
    NotificationKind.DAILY_REPORT.value: _REPORT,
}

_REPORT_COUNTERS = (
    "total_tasks",
    "todo_tasks",
    "in_progress_tasks",
    "in_review_tasks",
    "done_tasks",
    "overdue_tasks",
    "due_today_tasks",
    "p1_tasks",
    "p2_tasks",
)


def status_label(status: Any) -> str:
    """'in-progress' -> 'In Progress'."""
    raw = str(getattr(status, "value", status) or "todo")
    return " ".join(part.capitalize() for part in raw.split("-"))


class NotificationRenderer:
    """Builds subject + HTML body for a notification kind."""

    def __init__(
        self,
        *,
        app_name: str = "Workboard",
        public_url: str = "http://localhost:5173",
        date_format: str = "%d/%m/%Y",
    ) -> None:
        self._app_name = app_name or "Workboard"
        self._public_url = (public_url or "").rstrip("/")
        self._date_format = date_format

        env = Environment(
            loader=DictLoader(_TEMPLATES),
            autoescape=select_autoescape(default=True, default_for_string=True),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.filters["status_color"] = lambda s: STATUS_COLORS.get(
            str(getattr(s, "value", s)), _DEFAULT_STATUS_COLOR
        )
        env.filters["priority_color"] = lambda p: PRIORITY_COLORS.get(
            str(getattr(p, "value", p)), _DEFAULT_PRIORITY_COLOR
        )
        env.filters["status_label"] = status_label
        env.filters["fmt_date"] = self.format_date
        env.globals.update(
            app_name=self._app_name,
            public_url=self._public_url,
            status_colors=STATUS_COLORS,
            priority_colors=PRIORITY_COLORS,
        )
        self._env = env

    def format_date(self, value: Any) -> str:
        if isinstance(value, datetime):
            d: date | None = value.date()
        else:
            d = parse_due_date(value)
        if d is None:
            return "Not set"
        return d.strftime(self._date_format)

    def render(self, kind: NotificationKind | str, payload: Mapping[str, Any]) -> RenderedMessage:
        try:
            k = NotificationKind(kind)
        except ValueError as exc:
            raise ValueError(f"unknown notification kind: {kind!r}") from exc

        template = self._env.get_template(k.value)

        if k in (NotificationKind.TASK_CREATED, NotificationKind.TASK_UPDATED):
            task = _task_fields(payload)
            verb = "created" if k == NotificationKind.TASK_CREATED else "updated"
            heading = "New Task Created" if k == NotificationKind.TASK_CREATED else "Task Updated"
            html = template.render(task=task, verb=verb, heading=heading)
            code = str(payload.get("code") or "").strip()
            prefix = f"[{code}] " if code else ""
            subject = f"{prefix}Task {verb}: {task['title']}"
            return RenderedMessage(subject=subject, html=html)

        if k == NotificationKind.PASSWORD_ISSUED:
            html = template.render(
                name=payload.get("name"),
                email=payload.get("email"),
                password=payload.get("password"),
            )
            return RenderedMessage(
                subject=f"Welcome to {self._app_name} - Your Login Credentials",
                html=html,
            )

        if k == NotificationKind.TEST:
            return RenderedMessage(subject=f"Test Email from {self._app_name}", html=template.render())

        counters = {name: int(payload.get(name) or 0) for name in _REPORT_COUNTERS}
        report_date = str(payload.get("date") or "")
        html = template.render(date=report_date, **counters)
        return RenderedMessage(subject=f"Daily Task Report - {report_date}", html=html)


_TASK_FIELDS = ("id", "code", "title", "description", "status", "priority", "task_type", "assignee", "due_date")


def _task_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Every field the task layout shows, None when missing."""
    task = {name: payload.get(name) for name in _TASK_FIELDS}
    if not task["title"]:
        task["title"] = "Untitled task"
    return task
