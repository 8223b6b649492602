# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from worklog.core.ports import Requester
from worklog.core.state import AppState
from worklog.tasks.task_store import TaskStore

# 2024-03-10 12:00:00 UTC
DAY_D = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc).timestamp()
# 2024-03-11 09:00:00 UTC
DAY_D1 = datetime(2024, 3, 11, 9, 0, tzinfo=timezone.utc).timestamp()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="worklog",
        log_level="INFO",
        data_dir=tmp_path,
        db_path=tmp_path / "worklog.sqlite3",
        db_timeout_seconds=30.0,
        user_id="u1",
        username="alice",
        is_admin=False,
        openai_api_key=None,
        openai_base_url="",
        llm_model="gpt-3.5-turbo",
        llm_timeout_seconds=5.0,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    """Real SQLite store: its transactional behavior is part of what we test."""
    s = TaskStore(settings.db_path, timeout=settings.db_timeout_seconds)
    s.upsert_user("u1", "alice")
    s.upsert_user("u2", "bob")
    s.upsert_user("admin", "root", is_admin=True)
    return s


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    return AppState(settings=settings, store=store, requester=Requester(user_id="u1"))
