# src/workboard/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage and the mail transport swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Mapping
from email.message import EmailMessage
from typing import Any, Protocol


class TaskRepo(Protocol):
    def find(self) -> list[Any]: ...
    def find_by_id(self, task_id: int) -> Any | None: ...
    def find_by_code(self, code: str) -> Any | None: ...
    def add_task(self, *, code: str, payload: Mapping[str, Any]) -> Any: ...
    def find_by_id_and_update(self, task_id: int, payload: Mapping[str, Any]) -> Any | None: ...
    def find_by_id_and_delete(self, task_id: int) -> Any | None: ...


class CounterRepo(Protocol):
    def next(self, counter_name: str) -> int: ...
    def next_task_code(self) -> str: ...


class AuditRepo(Protocol):
    def append(
            self,
            *,
            task_id: int,
            action: Any,  # AuditAction (kept as Any to avoid import coupling)
            changes: dict[str, Any],
            actor: str,
            performed_at: float | None = None,
    ) -> Any: ...

    def set_delivery(self, entry_id: int, *, sent: bool, target: str | None) -> bool: ...
    def list_for_task(self, task_id: int) -> list[Any]: ...


class Directory(Protocol):
    """Person name -> contact address (external collaborator)."""

    def lookup(self, name: str) -> str | None: ...
    def list_entries(self) -> list[Any]: ...


class TransportConfigSource(Protocol):
    def get_smtp_config(self) -> Any: ...  # SmtpConfig


class ReportConfigSource(Protocol):
    def get_daily_report_config(self) -> Any: ...  # DailyReportConfig


class MailTransport(Protocol):
    """
    Sends one fully built message.

    Implementations raise on any delivery problem; the dispatcher turns
    exceptions into a delivery outcome.
    """

    def send(self, config: Any, message: EmailMessage) -> None: ...
