# src/workboard/core/errors.py

from __future__ import annotations


class StorageError(RuntimeError):
    """
    A store could not complete a read or write.

    Raised by the SQLite stores (wrapping sqlite3.Error) and propagated to the
    caller: a task mutation that hits it is reported as failed.
    """
