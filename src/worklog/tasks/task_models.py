# src/worklog/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ..core.errors import InvalidInput

MIN_LOG_MINUTES = 1
MAX_LOG_MINUTES = 1440


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Every status may move to every other one; "done" is not terminal.
    """

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(raw)
        except ValueError:
            return cls.TODO

    @classmethod
    def parse(cls, raw: object) -> TaskStatus:
        """Strict parsing for caller input (unlike from_db, never falls back)."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        allowed = ", ".join(s.value for s in cls)
        raise InvalidInput(f"Invalid status value {raw!r}; expected one of: {allowed}")


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str | None
    status: TaskStatus
    total_minutes: int
    user_id: str
    created_at: float
    updated_at: float


@dataclass(frozen=True, slots=True)
class TimeEntry:
    id: str
    task_id: str
    user_id: str
    minutes: int
    logged_at: float
    auto: bool = False


@dataclass(frozen=True, slots=True)
class StatusSwap:
    """What the store saw and wrote in one atomic status update."""

    task_id: str
    previous_status: TaskStatus
    status: TaskStatus
    total_minutes: int
    updated_at: float


@dataclass(frozen=True, slots=True)
class DailyLedgerRow:
    """One (date) group of a single user's ledger."""

    date: str
    total_minutes: int
    log_count: int


@dataclass(frozen=True, slots=True)
class DailyUserLedgerRow:
    """One (date, user, auto) group of the whole ledger."""

    date: str
    user_id: str
    username: str | None
    auto: bool
    minutes: int
    log_count: int
