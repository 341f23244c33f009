"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority) + TRACKED_FIELDS
- task_store.py: SQLite-backed task storage
- sequence.py: atomic named counters and WB-0001 style codes
- diff.py: snapshot diffing over the tracked fields
- task_api.py: lifecycle service (audit + notification on every mutation, reports)
"""
