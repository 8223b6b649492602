# src/worklog/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task operations and the reporter.

Operations depend on Protocols instead of the concrete SQLite store.
This keeps the store and the LLM provider swappable and lets tests inject
failing doubles.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Protocol


@dataclass(frozen=True, slots=True)
class Requester:
    """
    Already-authenticated caller identity.

    Resolved by the outer layer (tokens, sessions); trusted as-is here.
    """

    user_id: str
    is_admin: bool = False


class TaskRepo(Protocol):
    # Plain task records
    def add_task(
            self,
            *,
            user_id: str,
            title: str,
            description: str | None = None,
            status: Any = None,  # TaskStatus (kept as Any to avoid import coupling)
            total_minutes: int = 0,
            now_ts: float | None = None,
    ) -> Any: ...
    def get_task(self, task_id: str, user_id: str) -> Any | None: ...
    def list_tasks(
            self,
            user_id: str,
            *,
            status: Any | None = None,
            limit: int = 50,
            offset: int = 0,
    ) -> list[Any]: ...
    def update_task_fields(
            self,
            task_id: str,
            user_id: str,
            *,
            title: str | None = None,
            description: str | None = None,
    ) -> bool: ...
    def delete_task(self, task_id: str, user_id: str) -> bool: ...

    # State machine API (atomic read-then-write)
    def swap_status(
            self,
            task_id: str,
            user_id: str,
            new_status: Any,
            *,
            now_ts: float | None = None,
    ) -> Any | None: ...

    # Manual logger API (atomic insert + increment)
    def add_manual_entry(
            self,
            task_id: str,
            user_id: str,
            minutes: int,
            *,
            now_ts: float | None = None,
    ) -> Any | None: ...


class LedgerRepo(Protocol):
    # Reconciler API
    def add_auto_entry(
            self,
            task_id: str,
            user_id: str,
            minutes: int,
            *,
            now_ts: float | None = None,
    ) -> Any | None: ...
    def delete_auto_entries(self, task_id: str, user_id: str) -> int | None: ...

    # Reporter API
    def list_entries(self, task_id: str, user_id: str) -> list[Any]: ...
    def daily_totals_for_user(self, user_id: str) -> list[Any]: ...
    def daily_totals_by_user(self) -> list[Any]: ...


class UserRepo(Protocol):
    def upsert_user(self, user_id: str, username: str, *, is_admin: bool = False) -> None: ...


ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI-compatible)."""
    def stream_chat(
            self,
            messages: list[ChatMessage],
            system_prompt: str,
            *,
            max_tokens: int | None = None,
    ) -> Iterable[str]: ...
