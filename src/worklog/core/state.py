# src/worklog/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_store import TaskStore
from .ports import LLMClient, Requester


@dataclass
class AppState:
    # Settings object (config.Settings or a test SimpleNamespace).
    settings: object

    store: TaskStore
    requester: Requester

    # None means the AI helpers answer in stub mode.
    llm: LLMClient | None = None
