# src/workboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- SMTP / daily-report values here are only *defaults*; the settings store
  persists what administrators change at runtime.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "WORKBOARD"

EIGHT_HOURS_SECONDS = 8 * 60 * 60


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env never overrides the real environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    console_enabled: bool

    # ---- Links in notifications ----
    public_url: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    audit_db_path: Path
    directory_db_path: Path
    settings_db_path: Path

    # ---- SMTP defaults (seed values for the settings store) ----
    smtp_host: str
    smtp_port: int
    smtp_secure: bool
    smtp_user: str
    smtp_password: str
    smtp_from_email: str
    smtp_from_name: str
    smtp_timeout_seconds: float

    # ---- Daily report ----
    report_enabled: bool
    report_recipient: str
    report_send_to_all: bool
    report_interval_seconds: float

    # ---- Presentation ----
    date_format: str
    report_date_format: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _first_env(_k("APP_NAME"), default="Workboard") or "Workboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        # WORKBOARD_URL is the historical name of the public link variable.
        public_url = (_first_env(_k("PUBLIC_URL"), "WORKBOARD_URL", default="") or "").strip()
        public_url = (public_url or "http://localhost:5173").rstrip("/")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/workboard"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        audit_db_path = _env_path(_k("AUDIT_DB_PATH"), data_dir / "audit.sqlite3")
        directory_db_path = _env_path(_k("DIRECTORY_DB_PATH"), data_dir / "directory.sqlite3")
        settings_db_path = _env_path(_k("SETTINGS_DB_PATH"), data_dir / "settings.sqlite3")

        smtp_host = _env(_k("SMTP_HOST"), "").strip()
        smtp_port = _env_int(_k("SMTP_PORT"), 587)
        smtp_secure = _env_bool(_k("SMTP_SECURE"), False)
        smtp_user = _env(_k("SMTP_USER"), "").strip()
        smtp_password = _env(_k("SMTP_PASSWORD"), "")
        smtp_from_email = _env(_k("SMTP_FROM_EMAIL"), "").strip()
        smtp_from_name = _env(_k("SMTP_FROM_NAME"), app_name).strip() or app_name
        smtp_timeout_seconds = max(1.0, _env_float(_k("SMTP_TIMEOUT"), 15.0))

        report_enabled = _env_bool(_k("REPORT_ENABLED"), True)
        report_recipient = _env(_k("REPORT_RECIPIENT"), "").strip()
        report_send_to_all = _env_bool(_k("REPORT_SEND_TO_ALL"), False)
        report_interval_hours = _env_float(_k("REPORT_INTERVAL_HOURS"), 8.0)
        report_interval_seconds = (
            report_interval_hours * 3600 if report_interval_hours > 0 else float(EIGHT_HOURS_SECONDS)
        )

        date_format = _env(_k("DATE_FORMAT"), "%d/%m/%Y")
        report_date_format = _env(_k("REPORT_DATE_FORMAT"), "%A, %d %B %Y")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            public_url=public_url,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            audit_db_path=audit_db_path,
            directory_db_path=directory_db_path,
            settings_db_path=settings_db_path,
            smtp_host=smtp_host,
            smtp_port=smtp_port,
            smtp_secure=smtp_secure,
            smtp_user=smtp_user,
            smtp_password=smtp_password,
            smtp_from_email=smtp_from_email,
            smtp_from_name=smtp_from_name,
            smtp_timeout_seconds=smtp_timeout_seconds,
            report_enabled=report_enabled,
            report_recipient=report_recipient,
            report_send_to_all=report_send_to_all,
            report_interval_seconds=report_interval_seconds,
            date_format=date_format,
            report_date_format=report_date_format,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env for secrets; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    # Simple overrides for selected names. Keep it explicit.
    if hasattr(_config_local, "CONSOLE_ENABLED"):
        object.__setattr__(SETTINGS, "console_enabled", bool(_config_local.CONSOLE_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "REPORT_ENABLED"):
        object.__setattr__(SETTINGS, "report_enabled", bool(_config_local.REPORT_ENABLED))  # type: ignore[misc]
except Exception:
    pass


def get_settings() -> Settings:
    return SETTINGS
