# src/worklog/tasks/time_logger.py

from __future__ import annotations

import logging

from ..core.errors import InvalidInput, NotFound
from ..core.ports import TaskRepo
from .task_models import MAX_LOG_MINUTES, MIN_LOG_MINUTES, TimeEntry

logger = logging.getLogger(__name__)


def validate_minutes(minutes: object) -> int:
    # bool is an int subclass; True must not count as one minute.
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise InvalidInput(f"minutes must be an integer, got {minutes!r}")
    if not MIN_LOG_MINUTES <= minutes <= MAX_LOG_MINUTES:
        raise InvalidInput(
            f"minutes must be between {MIN_LOG_MINUTES} and {MAX_LOG_MINUTES}, got {minutes}"
        )
    return minutes


def log_time(
    repo: TaskRepo,
    task_id: str,
    requester_id: str,
    minutes: int,
    *,
    now_ts: float | None = None,
) -> TimeEntry:
    """
    Append a manual ledger entry and add its minutes to the task total.

    Both writes happen in one store transaction.
    """
    minutes = validate_minutes(minutes)

    entry = repo.add_manual_entry(task_id, requester_id, minutes, now_ts=now_ts)
    if entry is None:
        raise NotFound(
            f"Task {task_id} does not exist or you do not have access to it"
        )

    logger.info("Logged %s min task_id=%s user=%s entry=%s", minutes, task_id, requester_id, entry.id)
    return entry
