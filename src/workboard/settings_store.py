# src/workboard/settings_store.py

"""
Runtime-editable settings (SMTP transport, daily report).

Each section is a single row. When a section has never been saved, the
defaults passed to the constructor (usually taken from Settings/env) are
returned instead; nothing is written until an update happens.
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

from .core.errors import StorageError
from .notify.models import SmtpConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DailyReportConfig:
    enabled: bool = True
    recipient_email: str = ""
    send_to_all: bool = False


_SMTP_COLUMNS = tuple(f.name for f in fields(SmtpConfig))
_REPORT_COLUMNS = tuple(f.name for f in fields(DailyReportConfig))


class SettingsStore:
    def __init__(
        self,
        db_path: str | Path = "settings.sqlite3",
        *,
        smtp_defaults: SmtpConfig | None = None,
        report_defaults: DailyReportConfig | None = None,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._smtp_defaults = smtp_defaults or SmtpConfig()
        self._report_defaults = report_defaults or DailyReportConfig()
        self._ensure_schema()

    @classmethod
    def from_settings(cls, settings: Any) -> SettingsStore:
        return cls(
            settings.settings_db_path,
            smtp_defaults=SmtpConfig(
                host=settings.smtp_host,
                port=int(settings.smtp_port),
                secure=bool(settings.smtp_secure),
                user=settings.smtp_user,
                password=settings.smtp_password,
                from_email=settings.smtp_from_email,
                from_name=settings.smtp_from_name,
            ),
            report_defaults=DailyReportConfig(
                enabled=bool(settings.report_enabled),
                recipient_email=settings.report_recipient,
                send_to_all=bool(settings.report_send_to_all),
            ),
        )

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StorageError(f"settings store unavailable: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"settings store error: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS smtp_config (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    host TEXT NOT NULL DEFAULT '',
                    port INTEGER NOT NULL DEFAULT 587,
                    secure INTEGER NOT NULL DEFAULT 0,
                    user TEXT NOT NULL DEFAULT '',
                    password TEXT NOT NULL DEFAULT '',
                    from_email TEXT NOT NULL DEFAULT '',
                    from_name TEXT NOT NULL DEFAULT 'Workboard'
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS daily_report_config (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    enabled INTEGER NOT NULL DEFAULT 1,
                    recipient_email TEXT NOT NULL DEFAULT '',
                    send_to_all INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()

    # ---- SMTP ----

    def get_smtp_config(self) -> SmtpConfig:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM smtp_config WHERE id = 1").fetchone()
        if row is None:
            return self._smtp_defaults
        return SmtpConfig(
            host=str(row["host"] or ""),
            port=int(row["port"] or 587),
            secure=bool(row["secure"]),
            user=str(row["user"] or ""),
            password=str(row["password"] or ""),
            from_email=str(row["from_email"] or ""),
            from_name=str(row["from_name"] or ""),
        )

    def update_smtp_config(self, **changes: Any) -> SmtpConfig:
        unknown = set(changes) - set(_SMTP_COLUMNS)
        if unknown:
            raise ValueError(f"unknown SMTP settings: {sorted(unknown)}")
        config = replace(self.get_smtp_config(), **changes)
        self._save("smtp_config", _SMTP_COLUMNS, asdict(config))
        logger.info("SMTP config updated host=%s user=%s", config.host, config.user)
        return config

    # ---- Daily report ----

    def get_daily_report_config(self) -> DailyReportConfig:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM daily_report_config WHERE id = 1").fetchone()
        if row is None:
            return self._report_defaults
        return DailyReportConfig(
            enabled=bool(row["enabled"]),
            recipient_email=str(row["recipient_email"] or ""),
            send_to_all=bool(row["send_to_all"]),
        )

    def update_daily_report_config(self, **changes: Any) -> DailyReportConfig:
        unknown = set(changes) - set(_REPORT_COLUMNS)
        if unknown:
            raise ValueError(f"unknown daily report settings: {sorted(unknown)}")
        config = replace(self.get_daily_report_config(), **changes)
        self._save("daily_report_config", _REPORT_COLUMNS, asdict(config))
        logger.info(
            "Daily report config updated enabled=%s recipient=%s all=%s",
            config.enabled,
            config.recipient_email,
            config.send_to_all,
        )
        return config

    def _save(self, table: str, columns: tuple[str, ...], values: dict[str, Any]) -> None:
        cols = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(f"{c} = excluded.{c}" for c in columns)
        params = [int(v) if isinstance(v, bool) else v for v in (values[c] for c in columns)]
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO {table}(id, {cols}) VALUES (1, {placeholders})
                ON CONFLICT(id) DO UPDATE SET {updates}
                """,
                params,
            )
            conn.commit()
