# tests/test_time_logger.py

from __future__ import annotations

import threading

import pytest

from worklog.core.errors import InvalidInput, NotFound
from worklog.tasks.status_machine import transition
from worklog.tasks.task_models import TaskStatus
from worklog.tasks.task_store import TaskStore
from worklog.tasks.time_logger import log_time

from .conftest import DAY_D


def test_log_time_appends_manual_entry_and_bumps_total(store: TaskStore) -> None:
    task = store.add_task(user_id="u1", title="t", total_minutes=10, now_ts=DAY_D - 60)

    entry = log_time(store, task.id, "u1", 30, now_ts=DAY_D)
    assert entry.minutes == 30
    assert entry.auto is False
    assert entry.logged_at == DAY_D

    updated = store.get_task(task.id, "u1")
    assert updated.total_minutes == 40
    assert updated.updated_at == DAY_D
    assert [e.id for e in store.list_entries(task.id, "u1")] == [entry.id]


def test_log_time_twice_adds_exactly_sixty(store: TaskStore) -> None:
    task = store.add_task(user_id="u1", title="t")
    first = log_time(store, task.id, "u1", 30)
    second = log_time(store, task.id, "u1", 30)

    assert first.id != second.id
    assert store.get_task(task.id, "u1").total_minutes == 60
    manual = [e for e in store.list_entries(task.id, "u1") if not e.auto]
    assert len(manual) == 2


@pytest.mark.parametrize("minutes", [1, 1440])
def test_minutes_bounds_accepted(store: TaskStore, minutes: int) -> None:
    task = store.add_task(user_id="u1", title="t")
    assert log_time(store, task.id, "u1", minutes).minutes == minutes


@pytest.mark.parametrize("minutes", [0, 1441, -5, 2.5, "30", True, None])
def test_minutes_outside_domain_rejected(store: TaskStore, minutes) -> None:
    task = store.add_task(user_id="u1", title="t")
    with pytest.raises(InvalidInput):
        log_time(store, task.id, "u1", minutes)
    assert store.get_task(task.id, "u1").total_minutes == 0
    assert store.list_entries(task.id, "u1") == []


def test_log_time_on_foreign_task_is_not_found(store: TaskStore) -> None:
    task = store.add_task(user_id="u1", title="t")
    with pytest.raises(NotFound):
        log_time(store, task.id, "u2", 15)
    with pytest.raises(NotFound):
        log_time(store, "missing", "u1", 15)
    assert store.list_entries(task.id, "u1") == []
    assert store.list_entries(task.id, "u2") == []


def test_concurrent_logs_and_transitions_keep_totals(store: TaskStore) -> None:
    task = store.add_task(user_id="u1", title="t", total_minutes=5)
    start = threading.Barrier(4)
    errors: list[BaseException] = []

    def run(fn) -> None:
        try:
            start.wait(timeout=5)
            fn()
        except BaseException as e:  # surfaced via the errors list below
            errors.append(e)

    workers = [
        threading.Thread(target=run, args=(lambda: log_time(store, task.id, "u1", 30),)),
        threading.Thread(target=run, args=(lambda: log_time(store, task.id, "u1", 30),)),
        threading.Thread(target=run, args=(lambda: transition(store, task.id, "u1", TaskStatus.DONE),)),
        threading.Thread(target=run, args=(lambda: transition(store, task.id, "u1", TaskStatus.IN_PROGRESS),)),
    ]
    for w in workers:
        w.start()
    for w in workers:
        w.join(timeout=30)

    assert errors == []
    assert store.get_task(task.id, "u1").total_minutes == 65
    entries = store.list_entries(task.id, "u1")
    manual = [e for e in entries if not e.auto]
    assert sorted(e.minutes for e in manual) == [30, 30]
    # Whatever order the transitions landed in, the ledger matches the final status.
    final = store.get_task(task.id, "u1").status
    assert len([e for e in entries if e.auto]) == (1 if final is TaskStatus.DONE else 0)
