# src/workboard/tasks/sequence.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from pathlib import Path

from ..core.errors import StorageError

logger = logging.getLogger(__name__)

TASK_COUNTER = "taskId"
TASK_CODE_PREFIX = "WB"
TASK_CODE_WIDTH = 4


def format_task_code(value: int, *, prefix: str = TASK_CODE_PREFIX, width: int = TASK_CODE_WIDTH) -> str:
    """1 -> "WB-0001". Values wider than `width` are kept whole."""
    return f"{prefix}-{int(value):0{width}d}"


class SequenceGenerator:
    """
    Named monotonically increasing counters stored in SQLite.

    The increment-and-read is one statement (upsert + RETURNING), so two
    connections can never observe the same value. Counters never live in
    process memory: several processes may share the database file.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StorageError(f"counter store unavailable: {exc}") from exc
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS counters (
                    name TEXT PRIMARY KEY,
                    value INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def next(self, counter_name: str) -> int:
        if not counter_name:
            raise ValueError("counter_name is required")

        try:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    """
                    INSERT INTO counters(name, value) VALUES (?, 1)
                    ON CONFLICT(name) DO UPDATE SET value = value + 1
                    RETURNING value
                    """,
                    (counter_name,),
                )
                row = cur.fetchone()
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("Counter increment failed name=%s: %s", counter_name, exc)
            raise StorageError(f"counter {counter_name!r} unavailable: {exc}") from exc

        if row is None:
            raise StorageError(f"counter {counter_name!r} returned no value")
        value = int(row[0])
        logger.debug("Counter %s -> %s", counter_name, value)
        return value

    def current(self, counter_name: str) -> int:
        """Last issued value (0 if the counter was never used)."""
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM counters WHERE name = ?", (counter_name,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"counter {counter_name!r} unavailable: {exc}") from exc
        return int(row[0]) if row else 0

    def next_task_code(self) -> str:
        return format_task_code(self.next(TASK_COUNTER))
