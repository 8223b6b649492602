"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TimeEntry, TaskStatus)
- task_store.py: SQLite-backed storage for tasks and the time ledger
- status_machine.py: status transitions (triggers ledger reconciliation)
- reconciler.py: auto entry insert/retract on entering/leaving "done"
- time_logger.py: manual time entries
- task_api.py: plain task create/read/update/delete helpers
"""
