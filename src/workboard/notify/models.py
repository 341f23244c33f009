# src/workboard/notify/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class NotificationKind(StrEnum):
    TASK_CREATED = "task-created"
    TASK_UPDATED = "task-updated"
    PASSWORD_ISSUED = "password-issued"
    TEST = "test"
    DAILY_REPORT = "daily-report"


@dataclass(frozen=True, slots=True)
class SmtpConfig:
    """Transport settings. Empty strings are the normal "not configured" state."""

    host: str = ""
    port: int = 587
    secure: bool = False
    user: str = ""
    password: str = ""
    from_email: str = ""
    from_name: str = "Workboard"

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password and self.from_email)

    @property
    def sender(self) -> str:
        name = (self.from_name or "").replace('"', "'")
        return f'"{name}" <{self.from_email}>' if name else self.from_email


@dataclass(frozen=True, slots=True)
class RenderedMessage:
    subject: str
    html: str


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    sent: bool
    target: str | None = None
