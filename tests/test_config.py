# tests/test_config.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from workboard.config import EIGHT_HOURS_SECONDS, Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("WORKBOARD"):
            monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()
    assert s.app_name == "Workboard"
    assert s.public_url == "http://localhost:5173"
    assert s.data_dir == Path(".local/workboard")
    assert s.tasks_db_path == Path(".local/workboard/tasks.sqlite3")
    assert s.smtp_port == 587
    assert s.smtp_secure is False
    assert s.report_enabled is True
    assert s.report_interval_seconds == EIGHT_HOURS_SECONDS


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("WORKBOARD_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("WORKBOARD_URL", "https://board.example.test/")
    monkeypatch.setenv("WORKBOARD_SMTP_PORT", "465")
    monkeypatch.setenv("WORKBOARD_SMTP_SECURE", "yes")
    monkeypatch.setenv("WORKBOARD_REPORT_INTERVAL_HOURS", "0.5")

    s = Settings.from_env()
    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.public_url == "https://board.example.test"
    assert s.smtp_port == 465
    assert s.smtp_secure is True
    assert s.report_interval_seconds == 1800


def test_bad_numbers_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKBOARD_SMTP_PORT", "smtp")
    monkeypatch.setenv("WORKBOARD_REPORT_INTERVAL_HOURS", "-1")

    s = Settings.from_env()
    assert s.smtp_port == 587
    assert s.report_interval_seconds == EIGHT_HOURS_SECONDS
