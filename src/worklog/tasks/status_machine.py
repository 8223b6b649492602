# src/worklog/tasks/status_machine.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..core.errors import NotFound
from .reconciler import ReconcileOutcome, reconcile
from .task_models import TaskStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """
    Outcome of one status change.

    auto_time_logged / auto_time_removed report what the reconciler attempted;
    check outcome to know whether it actually committed.
    """

    task_id: str
    previous_status: TaskStatus
    status: TaskStatus
    auto_time_logged: bool
    auto_time_removed: bool
    outcome: ReconcileOutcome
    error: str | None = None

    @property
    def side_effect_failed(self) -> bool:
        return self.outcome is ReconcileOutcome.SIDE_EFFECT_FAILED

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": "Task status updated successfully",
            "status": self.status.value,
            "autoTimeLogged": self.auto_time_logged,
            "autoTimeRemoved": self.auto_time_removed,
        }


def transition(
    repo: Any,
    task_id: str,
    requester_id: str,
    new_status: TaskStatus | str,
    *,
    now_ts: float | None = None,
) -> TransitionResult:
    """
    Move a task to new_status, then reconcile the time ledger.

    repo must implement both TaskRepo and LedgerRepo (see core.ports).

    Raises:
    - InvalidInput if new_status is not a known status
    - NotFound if no task matches task_id + requester_id
    - StorageFailure if the status write itself fails
    """
    status = TaskStatus.parse(new_status)

    swap = repo.swap_status(task_id, requester_id, status, now_ts=now_ts)
    if swap is None:
        raise NotFound(
            f"Task {task_id} does not exist or you do not have access to it"
        )

    logger.info(
        "Task status changed task_id=%s user=%s %s->%s",
        task_id,
        requester_id,
        swap.previous_status.value,
        swap.status.value,
    )

    report = reconcile(
        repo,
        task_id,
        requester_id,
        swap.previous_status,
        swap.status,
        estimated_minutes=swap.total_minutes,
        now_ts=now_ts,
    )

    return TransitionResult(
        task_id=task_id,
        previous_status=swap.previous_status,
        status=swap.status,
        auto_time_logged=report.auto_time_logged,
        auto_time_removed=report.auto_time_removed,
        outcome=report.outcome,
        error=report.error,
    )
