# src/workboard/tasks/diff.py

"""
Snapshot diffing.

Pure functions, no I/O. Values are compared through a canonical form so that
"todo" and TaskStatus.TODO, a date and its ISO string, or the same labels in a
different order are all considered equal.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

from .task_models import TRACKED_FIELDS

Change = dict[str, Any]

# Fields with set semantics: order does not matter.
_SET_FIELDS = frozenset({"labels"})


def to_plain(value: Any) -> Any:
    """JSON-safe version of a snapshot value (enums by value, dates as ISO strings)."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted((to_plain(v) for v in value), key=str)
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}
    return value


def canonical(field_name: str, value: Any) -> str:
    plain = to_plain(value)
    if field_name in _SET_FIELDS and isinstance(plain, list):
        plain = sorted(set(str(v) for v in plain))
    if field_name == "due_date" and isinstance(plain, str):
        # A datetime and a date on the same day are the same due date.
        plain = plain[:10]
    return json.dumps(plain, sort_keys=True, ensure_ascii=False, default=str)


def diff(
    old: Mapping[str, Any],
    new: Mapping[str, Any],
    tracked_fields: Iterable[str] = TRACKED_FIELDS,
) -> dict[str, Change]:
    """
    Compare `old` (full snapshot) against `new` (partial payload).

    Only tracked fields the caller actually supplied in `new` are compared;
    a missing key means "unchanged". Keys outside `tracked_fields` are ignored.
    """
    changes: dict[str, Change] = {}
    for name in tracked_fields:
        if name not in new:
            continue
        old_val = old.get(name)
        new_val = new[name]
        if canonical(name, old_val) != canonical(name, new_val):
            changes[name] = {"from": to_plain(old_val), "to": to_plain(new_val)}
    return changes


def classify(changes: Mapping[str, Any]) -> str:
    """A status change wins over any other field for labelling the entry."""
    return "status_changed" if "status" in changes else "updated"
