# src/workboard/audit/store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ..core.errors import StorageError
from .models import AuditAction, AuditEntry

logger = logging.getLogger(__name__)


class AuditStore:
    """
    Append-only SQLite store for audit entries.

    There is no delete and no general update: the only write after insert
    touches the two delivery columns.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "audit.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("AuditStore ready db=%s", self._db_path)

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StorageError(f"audit store unavailable: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"audit store error: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS task_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id INTEGER NOT NULL,
                    action TEXT NOT NULL,
                    changes TEXT NOT NULL DEFAULT '{}',
                    performed_by TEXT NOT NULL DEFAULT 'System',
                    performed_at REAL NOT NULL,
                    email_sent INTEGER NOT NULL DEFAULT 0,
                    email_to TEXT
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_history_task ON task_history(task_id, id)")
            conn.commit()

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> AuditEntry:
        try:
            changes = json.loads(row["changes"] or "{}")
        except ValueError:
            changes = {}
        return AuditEntry(
            id=int(row["id"]),
            task_id=int(row["task_id"]),
            action=AuditAction(row["action"]),
            changes=changes if isinstance(changes, dict) else {},
            actor=str(row["performed_by"] or ""),
            performed_at=float(row["performed_at"] or 0.0),
            email_sent=bool(row["email_sent"]),
            email_to=row["email_to"],
        )

    def append(
        self,
        *,
        task_id: int,
        action: AuditAction,
        changes: dict[str, Any],
        actor: str,
        performed_at: float | None = None,
    ) -> AuditEntry:
        if performed_at is None:
            performed_at = time.time()
        changes_str = json.dumps(changes, ensure_ascii=False, default=str)

        with self._connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO task_history(task_id, action, changes, performed_by, performed_at, email_sent, email_to)
                VALUES (?, ?, ?, ?, ?, 0, NULL)
                """,
                (int(task_id), action.value, changes_str, actor, float(performed_at)),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for task_history insert")

        entry = AuditEntry(
            id=int(rowid),
            task_id=int(task_id),
            action=action,
            changes=json.loads(changes_str),
            actor=actor,
            performed_at=float(performed_at),
        )
        logger.debug("Audit entry id=%s task_id=%s action=%s", entry.id, task_id, action.value)
        return entry

    def set_delivery(self, entry_id: int, *, sent: bool, target: str | None) -> bool:
        """Write the delivery columns. Returns True if a row actually changed."""
        with self._connect() as conn:
            cur = conn.execute(
                """
                UPDATE task_history
                SET email_sent = ?, email_to = ?
                WHERE id = ?
                  AND (email_sent != ? OR email_to IS NOT ?)
                """,
                (int(sent), target, int(entry_id), int(sent), target),
            )
            conn.commit()
            return cur.rowcount == 1

    def get(self, entry_id: int) -> AuditEntry | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM task_history WHERE id = ?", (int(entry_id),)).fetchone()
            return self._row_to_entry(row) if row else None

    def list_for_task(self, task_id: int) -> list[AuditEntry]:
        """Most recent first, in the order the store accepted the writes."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM task_history
                WHERE task_id = ?
                ORDER BY id DESC
                """,
                (int(task_id),),
            ).fetchall()
            return [self._row_to_entry(r) for r in rows]

    def count_entries(self) -> int:
        with self._connect() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM task_history").fetchone()
            return int(n)
