# src/workboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..audit.log import AuditLog
from ..directory.store import DirectoryStore
from ..notify.dispatcher import NotificationDispatcher
from ..settings_store import SettingsStore
from ..tasks.sequence import SequenceGenerator
from ..tasks.task_api import LifecycleService
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskStore
    counters: SequenceGenerator
    audit: AuditLog
    directory: DirectoryStore
    settings_store: SettingsStore
    dispatcher: NotificationDispatcher
    lifecycle: LifecycleService
