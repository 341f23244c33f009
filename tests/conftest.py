# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from workboard.cli.bootstrap import create_initial_state
from workboard.core.state import AppState

from .fakes import CONFIGURED_SMTP, FakeMailTransport


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="Workboard",
        log_level="DEBUG",
        console_enabled=False,
        public_url="https://workboard.example.test",
        # Paths (tmp per test run)
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        audit_db_path=tmp_path / "audit.sqlite3",
        directory_db_path=tmp_path / "directory.sqlite3",
        settings_db_path=tmp_path / "settings.sqlite3",
        # SMTP defaults: configured, so dispatch reaches the fake transport
        smtp_host=CONFIGURED_SMTP.host,
        smtp_port=CONFIGURED_SMTP.port,
        smtp_secure=CONFIGURED_SMTP.secure,
        smtp_user=CONFIGURED_SMTP.user,
        smtp_password=CONFIGURED_SMTP.password,
        smtp_from_email=CONFIGURED_SMTP.from_email,
        smtp_from_name=CONFIGURED_SMTP.from_name,
        smtp_timeout_seconds=5.0,
        # Daily report
        report_enabled=True,
        report_recipient="lead@example.test",
        report_send_to_all=False,
        report_interval_seconds=8 * 3600,
        # Presentation
        date_format="%d/%m/%Y",
        report_date_format="%A, %d %B %Y",
    )


@pytest.fixture()
def transport() -> FakeMailTransport:
    return FakeMailTransport()


@pytest.fixture()
def state(settings: SimpleNamespace, transport: FakeMailTransport) -> AppState:
    """
    AppState wired with a recording mail transport.

    NOTE: We keep real SQLite stores here because their correctness
    (atomic counters, append-only history) is part of what we want to test.
    """
    st = create_initial_state(settings=settings, transport=transport)
    st.directory.add_entry("Alice", "alice@example.test")
    st.directory.add_entry("Bob", "bob@example.test")
    return st
