# src/workboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete stores, the mail transport and the renderer into AppState.
"""

from __future__ import annotations

import logging

from ..audit.log import AuditLog
from ..audit.store import AuditStore
from ..config import get_settings
from ..core.ports import MailTransport
from ..core.state import AppState
from ..directory.store import DirectoryStore
from ..notify.dispatcher import NotificationDispatcher, SmtpMailTransport
from ..notify.renderer import NotificationRenderer
from ..settings_store import SettingsStore
from ..tasks.sequence import SequenceGenerator
from ..tasks.task_api import LifecycleService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.audit_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.directory_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.settings_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, transport: MailTransport | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the transport) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if transport is None:
        transport = SmtpMailTransport(timeout_seconds=settings.smtp_timeout_seconds)

    task_store = TaskStore(settings.tasks_db_path)
    # Counters share the tasks database: codes and rows live side by side.
    counters = SequenceGenerator(settings.tasks_db_path)
    audit = AuditLog(AuditStore(settings.audit_db_path))
    directory = DirectoryStore(settings.directory_db_path)
    settings_store = SettingsStore.from_settings(settings)

    renderer = NotificationRenderer(
        app_name=settings.app_name,
        public_url=settings.public_url,
        date_format=settings.date_format,
    )
    dispatcher = NotificationDispatcher(
        config_source=settings_store,
        transport=transport,
        renderer=renderer,
    )
    lifecycle = LifecycleService(
        tasks=task_store,
        counters=counters,
        audit=audit,
        dispatcher=dispatcher,
        directory=directory,
        report_config=settings_store,
        report_date_format=settings.report_date_format,
    )

    logger.debug("AppState wired (data_dir=%s)", settings.data_dir)
    return AppState(
        settings=settings,
        task_store=task_store,
        counters=counters,
        audit=audit,
        directory=directory,
        settings_store=settings_store,
        dispatcher=dispatcher,
        lifecycle=lifecycle,
    )
