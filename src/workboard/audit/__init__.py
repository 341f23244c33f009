"""Append-only audit trail of task lifecycle events."""
