# src/worklog/tasks/task_api.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.errors import InvalidInput, NotFound
from ..core.ports import TaskRepo
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 200


@dataclass(frozen=True, slots=True)
class TaskListing:
    tasks: list[Task]
    is_empty: bool
    message: str


def _not_found(task_id: str) -> NotFound:
    return NotFound(f"Task {task_id} does not exist or you do not have access to it")


def create_task(
    repo: TaskRepo,
    requester_id: str,
    *,
    title: str,
    description: str | None = None,
    status: TaskStatus | str = TaskStatus.TODO,
    total_minutes: int = 0,
    now_ts: float | None = None,
) -> Task:
    """Create a task owned by requester_id (status defaults to todo)."""
    if not title or not title.strip():
        raise InvalidInput("Task title is required")
    if isinstance(total_minutes, bool) or not isinstance(total_minutes, int) or total_minutes < 0:
        raise InvalidInput("total_minutes must be a non-negative integer")

    task = repo.add_task(
        user_id=requester_id,
        title=title.strip(),
        description=description.strip() if description else None,
        status=TaskStatus.parse(status),
        total_minutes=total_minutes,
        now_ts=now_ts,
    )
    logger.info("Task created id=%s user=%s status=%s", task.id, requester_id, task.status.value)
    return task


def get_task(repo: TaskRepo, task_id: str, requester_id: str) -> Task:
    task = repo.get_task(task_id, requester_id)
    if task is None:
        raise _not_found(task_id)
    return task


def list_tasks(
    repo: TaskRepo,
    requester_id: str,
    *,
    status: TaskStatus | str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> TaskListing:
    """
    The requester's tasks, newest first.

    An empty page is reported explicitly (is_empty) rather than as a bare [].
    """
    status_filter = TaskStatus.parse(status) if status is not None else None
    limit = max(1, min(int(limit), MAX_LIST_LIMIT))
    offset = max(0, int(offset))

    tasks = repo.list_tasks(requester_id, status=status_filter, limit=limit, offset=offset)
    if not tasks:
        suffix = f" with status '{status_filter.value}'" if status_filter else ""
        return TaskListing(
            tasks=[],
            is_empty=True,
            message=f"No tasks found{suffix}. Create your first task to get started!",
        )
    return TaskListing(tasks=tasks, is_empty=False, message=f"Found {len(tasks)} task(s)")


def update_task(
    repo: TaskRepo,
    task_id: str,
    requester_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
) -> Task:
    """Plain field edits. Status and time go through status_machine / time_logger."""
    if title is None and description is None:
        raise InvalidInput("At least one field to update is required")
    if title is not None and not title.strip():
        raise InvalidInput("Task title cannot be empty")

    changed = repo.update_task_fields(
        task_id,
        requester_id,
        title=title.strip() if title is not None else None,
        description=description.strip() if description is not None else None,
    )
    if not changed:
        raise _not_found(task_id)
    return get_task(repo, task_id, requester_id)


def delete_task(repo: TaskRepo, task_id: str, requester_id: str) -> None:
    if not repo.delete_task(task_id, requester_id):
        raise _not_found(task_id)
    logger.info("Task deleted id=%s user=%s", task_id, requester_id)
