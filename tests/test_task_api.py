# tests/test_task_api.py

from __future__ import annotations

import pytest

from worklog.core.errors import InvalidInput, NotFound
from worklog.tasks import task_api
from worklog.tasks.task_models import TaskStatus
from worklog.tasks.task_store import TaskStore


def test_create_task_defaults(store: TaskStore) -> None:
    task = task_api.create_task(store, "u1", title="  Plan sprint  ")
    assert task.title == "Plan sprint"
    assert task.status is TaskStatus.TODO
    assert task.total_minutes == 0
    assert task.description is None


def test_create_task_with_status_and_estimate(store: TaskStore) -> None:
    task = task_api.create_task(store, "u1", title="t", status="in_progress", total_minutes=90)
    stored = task_api.get_task(store, task.id, "u1")
    assert stored.status is TaskStatus.IN_PROGRESS
    assert stored.total_minutes == 90


@pytest.mark.parametrize(
    "kwargs",
    [
        {"title": ""},
        {"title": "   "},
        {"title": "t", "total_minutes": -1},
        {"title": "t", "total_minutes": "10"},
        {"title": "t", "status": "blocked"},
    ],
)
def test_create_task_rejects_bad_input(store: TaskStore, kwargs) -> None:
    with pytest.raises(InvalidInput):
        task_api.create_task(store, "u1", **kwargs)
    assert store.count_tasks() == 0


def test_list_tasks_reports_empty_state(store: TaskStore) -> None:
    listing = task_api.list_tasks(store, "u1")
    assert listing.is_empty is True
    assert listing.tasks == []

    task_api.create_task(store, "u1", title="t")
    listing = task_api.list_tasks(store, "u1")
    assert listing.is_empty is False
    assert listing.message == "Found 1 task(s)"

    done = task_api.list_tasks(store, "u1", status="done")
    assert done.is_empty is True
    assert "status 'done'" in done.message


def test_get_task_hides_other_users_tasks(store: TaskStore) -> None:
    task = task_api.create_task(store, "u1", title="t")
    with pytest.raises(NotFound):
        task_api.get_task(store, task.id, "u2")


def test_update_task(store: TaskStore) -> None:
    task = task_api.create_task(store, "u1", title="t")
    updated = task_api.update_task(store, task.id, "u1", title="renamed", description="more")
    assert (updated.title, updated.description) == ("renamed", "more")

    with pytest.raises(InvalidInput):
        task_api.update_task(store, task.id, "u1")
    with pytest.raises(InvalidInput):
        task_api.update_task(store, task.id, "u1", title=" ")
    with pytest.raises(NotFound):
        task_api.update_task(store, task.id, "u2", title="x")


def test_update_task_strips_fields_like_create(store: TaskStore) -> None:
    task = task_api.create_task(store, "u1", title="t", description="  first  ")
    assert task.description == "first"

    updated = task_api.update_task(store, task.id, "u1", title="  t2 ", description="  second\n")
    assert (updated.title, updated.description) == ("t2", "second")


def test_delete_task(store: TaskStore) -> None:
    task = task_api.create_task(store, "u1", title="t")
    with pytest.raises(NotFound):
        task_api.delete_task(store, task.id, "u2")
    task_api.delete_task(store, task.id, "u1")
    with pytest.raises(NotFound):
        task_api.get_task(store, task.id, "u1")
