# src/worklog/tasks/reconciler.py

"""
Time-ledger reconciler.

Keeps the ledger consistent with a task's completion state:
- entering "done" credits the task's current total as one auto entry,
- leaving "done" retracts every auto entry of that task.

The side effect is best-effort. Storage errors are logged here and reported
through ReconcileOutcome instead of being raised, so a committed status
change is never undone by a ledger failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from ..core.errors import StorageFailure
from ..core.ports import LedgerRepo
from .task_models import TaskStatus

logger = logging.getLogger(__name__)


class ReconcileAction(StrEnum):
    NONE = "none"
    LOG_AUTO = "log_auto"
    RETRACT_AUTO = "retract_auto"


class ReconcileOutcome(StrEnum):
    COMMITTED = "committed"
    # A later transition on the same task already moved it back across "done".
    SUPERSEDED = "superseded"
    SIDE_EFFECT_FAILED = "side_effect_failed"


@dataclass(frozen=True, slots=True)
class ReconcileReport:
    action: ReconcileAction
    outcome: ReconcileOutcome
    error: str | None = None

    @property
    def auto_time_logged(self) -> bool:
        return self.action is ReconcileAction.LOG_AUTO

    @property
    def auto_time_removed(self) -> bool:
        return self.action is ReconcileAction.RETRACT_AUTO


def plan_reconciliation(
    previous_status: TaskStatus,
    new_status: TaskStatus,
    estimated_minutes: int,
) -> ReconcileAction:
    """Pure decision: which ledger side effect (if any) a status edge triggers."""
    if new_status is TaskStatus.DONE:
        if previous_status is not TaskStatus.DONE and estimated_minutes > 0:
            return ReconcileAction.LOG_AUTO
        return ReconcileAction.NONE

    if previous_status is TaskStatus.DONE:
        return ReconcileAction.RETRACT_AUTO

    return ReconcileAction.NONE


def reconcile(
    repo: LedgerRepo,
    task_id: str,
    user_id: str,
    previous_status: TaskStatus,
    new_status: TaskStatus,
    estimated_minutes: int,
    *,
    now_ts: float | None = None,
) -> ReconcileReport:
    """
    Apply the planned side effect for one status edge.

    The store re-checks the task's current status inside the write, so an
    edge that a concurrent transition has already overtaken is skipped
    (SUPERSEDED) rather than leaving the ledger out of step with the task.
    """
    action = plan_reconciliation(previous_status, new_status, estimated_minutes)
    if action is ReconcileAction.NONE:
        return ReconcileReport(action=action, outcome=ReconcileOutcome.COMMITTED)

    edge = f"{previous_status.value}->{new_status.value}"
    try:
        if action is ReconcileAction.LOG_AUTO:
            applied = repo.add_auto_entry(task_id, user_id, estimated_minutes, now_ts=now_ts) is not None
            if applied:
                logger.info(
                    "Auto-logged %s min task_id=%s user=%s edge=%s",
                    estimated_minutes,
                    task_id,
                    user_id,
                    edge,
                )
        else:
            removed = repo.delete_auto_entries(task_id, user_id)
            applied = removed is not None
            if applied:
                logger.info(
                    "Retracted %s auto entries task_id=%s user=%s edge=%s",
                    removed,
                    task_id,
                    user_id,
                    edge,
                )
    except StorageFailure as e:
        logger.exception(
            "Ledger reconciliation failed task_id=%s edge=%s action=%s",
            task_id,
            edge,
            action.value,
        )
        return ReconcileReport(
            action=action,
            outcome=ReconcileOutcome.SIDE_EFFECT_FAILED,
            error=str(e),
        )

    if not applied:
        logger.info("Reconciliation superseded task_id=%s edge=%s", task_id, edge)
        return ReconcileReport(action=action, outcome=ReconcileOutcome.SUPERSEDED)

    return ReconcileReport(action=action, outcome=ReconcileOutcome.COMMITTED)
