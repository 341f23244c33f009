# src/workboard/directory/store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from ..core.errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    name: str
    email: str


class DirectoryStore:
    """
    People directory: display name -> contact address.

    Task assignees are free text; lookup() matches them against `name` exactly.
    """

    def __init__(self, db_path: str | Path = "directory.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("DirectoryStore ready db=%s", self._db_path)

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StorageError(f"directory unavailable: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"directory error: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS people (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    created_at REAL NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_people_name ON people(name)")
            conn.commit()

    def add_entry(self, name: str, email: str) -> DirectoryEntry:
        """Insert or rename (email is the unique key)."""
        name = (name or "").strip()
        email = (email or "").strip()
        if not name:
            raise ValueError("name is required")
        if "@" not in email:
            raise ValueError("a valid email is required")

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO people(name, email, created_at) VALUES (?, ?, ?)
                ON CONFLICT(email) DO UPDATE SET name = excluded.name
                """,
                (name, email, time.time()),
            )
            conn.commit()
        logger.debug("Directory entry saved name=%s email=%s", name, email)
        return DirectoryEntry(name=name, email=email)

    def remove_entry(self, email: str) -> bool:
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM people WHERE email = ?", ((email or "").strip(),))
            conn.commit()
            return cur.rowcount == 1

    def lookup(self, name: str) -> str | None:
        if not name:
            return None
        with self._connect() as conn:
            row = conn.execute(
                "SELECT email FROM people WHERE name = ? ORDER BY id ASC LIMIT 1",
                (name.strip(),),
            ).fetchone()
            return str(row["email"]) if row else None

    def list_entries(self) -> list[DirectoryEntry]:
        with self._connect() as conn:
            rows = conn.execute("SELECT name, email FROM people ORDER BY name ASC, id ASC").fetchall()
            return [DirectoryEntry(name=str(r["name"]), email=str(r["email"])) for r in rows]
