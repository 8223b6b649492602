"""worklog: per-user task tracking with an auto-reconciled time ledger."""

__version__ = "0.1.0"
