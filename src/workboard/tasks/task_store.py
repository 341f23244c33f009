# src/workboard/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from ..core.errors import StorageError
from .task_models import (
    EDITABLE_FIELDS,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    parse_due_date,
)

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection

    Errors:
    - any sqlite3.Error surfaces as StorageError
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

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
            raise StorageError(f"task store unavailable: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"task store error: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    code TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    assignee TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'todo',
                    priority TEXT NOT NULL DEFAULT 'P3',
                    due_date TEXT,
                    labels TEXT NOT NULL DEFAULT '[]',
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("task_type", "TEXT NOT NULL DEFAULT 'task'")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status_due ON tasks(status, due_date)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks(assignee)")
            conn.commit()

    @staticmethod
    def _labels_to_str(labels: Any) -> str:
        if not labels:
            return "[]"
        if isinstance(labels, str):
            labels = [labels]
        try:
            return json.dumps([str(x) for x in labels], ensure_ascii=False)
        except TypeError:
            logger.exception("Failed to JSON-encode labels; storing [].")
            return "[]"

    @staticmethod
    def _str_to_labels(s: str | None) -> list[str]:
        if not s:
            return []
        try:
            val = json.loads(s)
            return [str(x) for x in val] if isinstance(val, list) else []
        except ValueError:
            return []

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            code=str(row["code"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            assignee=str(row["assignee"] or ""),
            status=TaskStatus.from_db(row["status"]),
            priority=TaskPriority.from_db(row["priority"]),
            due_date=parse_due_date(row["due_date"]),
            labels=self._str_to_labels(row["labels"]),
            task_type=TaskType.from_db(row["task_type"]),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    def _column_value(self, name: str, value: Any) -> Any:
        if name == "status":
            return TaskStatus(value).value
        if name == "priority":
            return TaskPriority(value).value
        if name == "task_type":
            return TaskType(value).value
        if name == "due_date":
            d = parse_due_date(value)
            return d.isoformat() if d else None
        if name == "labels":
            return self._labels_to_str(value)
        return "" if value is None else str(value)

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._connect() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def add_task(self, *, code: str, payload: Mapping[str, Any]) -> Task:
        """
        Insert a task under an already-issued `code`.

        Unknown payload keys are ignored; enum values are validated.
        """
        title = str(payload.get("title") or "").strip()
        if not code:
            raise ValueError("code is required")
        if not title:
            raise ValueError("title is required")

        values = {
            "title": title,
            "description": payload.get("description") or "",
            "assignee": payload.get("assignee") or "",
            "status": payload.get("status") or TaskStatus.TODO,
            "priority": payload.get("priority") or TaskPriority.P3,
            "due_date": payload.get("due_date"),
            "labels": payload.get("labels") or [],
            "task_type": payload.get("task_type") or TaskType.TASK,
        }
        row = {k: self._column_value(k, v) for k, v in values.items()}

        now = time.time()
        with self._connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(
                    code, title, description, assignee, status, priority,
                    due_date, labels, task_type, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    code,
                    row["title"],
                    row["description"],
                    row["assignee"],
                    row["status"],
                    row["priority"],
                    row["due_date"],
                    row["labels"],
                    row["task_type"],
                    now,
                    now,
                ),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)

        logger.debug("Task added id=%s code=%s status=%s", task_id, code, row["status"])
        task = self.find_by_id(task_id)
        if task is None:
            raise StorageError(f"task {task_id} vanished right after insert")
        return task

    def find(self) -> list[Task]:
        """All tasks, newest first."""
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM tasks ORDER BY created_at DESC, id DESC").fetchall()
            return [self._row_to_task(r) for r in rows]

    def find_by_id(self, task_id: int) -> Task | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def find_by_code(self, code: str) -> Task | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE code = ?", (code.strip().upper(),)).fetchone()
            return self._row_to_task(row) if row else None

    def find_by_id_and_update(self, task_id: int, payload: Mapping[str, Any]) -> Task | None:
        """
        Apply a partial update and return the new snapshot (None if the task is gone).

        The code is immutable and never part of an update.
        """
        fields: list[str] = []
        params: list[Any] = []
        for name in EDITABLE_FIELDS:
            if name not in payload:
                continue
            if name == "title" and not str(payload[name] or "").strip():
                raise ValueError("title cannot be empty")
            fields.append(f"{name} = ?")
            params.append(self._column_value(name, payload[name]))

        if fields:
            fields.append("updated_at = ?")
            params.append(time.time())
            params.append(int(task_id))
            sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"
            with self._connect() as conn:
                conn.execute(sql, params)
                conn.commit()

        return self.find_by_id(task_id)

    def find_by_id_and_delete(self, task_id: int) -> Task | None:
        """Delete and return the removed snapshot (None if nothing was deleted)."""
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            if row is None:
                return None
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            if cur.rowcount != 1:
                return None
            return self._row_to_task(row)
