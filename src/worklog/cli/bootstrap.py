# src/worklog/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite store, the optional LLM client and the console identity into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import LLMClient, Requester, UserRepo
from ..core.state import AppState
from ..llm.client import OpenAILLMClient
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def _register_identity(users: UserRepo, settings) -> Requester:
    requester = Requester(user_id=settings.user_id, is_admin=settings.is_admin)
    # Label for admin reports; identity itself is trusted as configured.
    users.upsert_user(requester.user_id, settings.username, is_admin=requester.is_admin)
    logger.debug("Console identity user=%s admin=%s", requester.user_id, requester.is_admin)
    return requester


def _create_llm(settings) -> LLMClient | None:
    try:
        return OpenAILLMClient(settings)
    except RuntimeError as e:
        # Local runs without an API key: /plan and /suggest answer in stub mode.
        logger.info("AI helpers in stub mode: %s", e)
        return None


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(settings.db_path, timeout=settings.db_timeout_seconds)
    requester = _register_identity(store, settings)

    return AppState(settings=settings, store=store, requester=requester, llm=_create_llm(settings))
