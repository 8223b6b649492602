# src/worklog/tasks/task_assistant.py

"""
AI helpers: task description suggestions and a daily plan.

Both run against an LLMClient when one is configured. Without a client
(no API key) they answer in stub mode with a fixed hint, and a provider
failure is also reported as a stub reply instead of an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..core.errors import InvalidInput, LLMUnavailable
from ..core.ports import LLMClient, TaskRepo
from . import task_api
from .task_models import Task

logger = logging.getLogger(__name__)

DESCRIPTION_SYSTEM_PROMPT = (
    "You are a helpful engineering team assistant. "
    "Generate concise, actionable task descriptions for sprint planning."
)
PLAN_SYSTEM_PROMPT = (
    "You are a helpful engineering team assistant. "
    "Generate concise daily planning suggestions based on current tasks."
)

DESCRIPTION_MAX_TOKENS = 150
PLAN_MAX_TOKENS = 200


@dataclass(frozen=True, slots=True)
class DescriptionSuggestion:
    title: str
    description: str
    is_stub: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "isStub": self.is_stub,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class DailyPlan:
    plan: str
    is_stub: bool
    task_count: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "plan": self.plan,
            "isStub": self.is_stub,
            "taskCount": self.task_count,
            "message": self.message,
        }


def _complete(llm: LLMClient, prompt: str, system_prompt: str, max_tokens: int) -> str:
    text = "".join(llm.stream_chat([{"role": "user", "content": prompt}], system_prompt, max_tokens=max_tokens))
    if not text.strip():
        raise LLMUnavailable("Model returned an empty reply")
    return text.strip()


def suggest_description(title: str, llm: LLMClient | None) -> DescriptionSuggestion:
    """Draft a description for a task title (stub text when llm is None)."""
    if not title or not title.strip():
        raise InvalidInput("Task title is required")
    title = title.strip()

    is_stub = True
    if llm is None:
        description = (
            f"Task: {title}\n\n"
            "This is a placeholder description. Set OPENAI_API_KEY to generate AI-powered descriptions."
        )
    else:
        prompt = (
            f'Generate a clear, actionable description for this task: "{title}". '
            "Keep it under 200 words and focus on what needs to be done."
        )
        try:
            description = _complete(llm, prompt, DESCRIPTION_SYSTEM_PROMPT, DESCRIPTION_MAX_TOKENS)
            is_stub = False
        except LLMUnavailable as e:
            logger.warning("Description suggestion failed: %s", e)
            description = f"Task: {title}\n\nError generating AI description: {e}"

    message = (
        "Description generated (stub mode - set OPENAI_API_KEY for AI-powered descriptions)"
        if is_stub
        else "AI-powered description generated successfully"
    )
    return DescriptionSuggestion(title=title, description=description, is_stub=is_stub, message=message)


def _task_summary(tasks: list[Task]) -> str:
    return "\n".join(f"- {t.title} ({t.status.value}, {t.total_minutes}min)" for t in tasks)


def daily_plan(repo: TaskRepo, requester_id: str, llm: LLMClient | None) -> DailyPlan:
    """
    Suggest a plan for today from the requester's current tasks.

    Uses the same first page as the task listing (newest first).
    """
    listing = task_api.list_tasks(repo, requester_id)
    if listing.is_empty:
        return DailyPlan(
            plan=(
                "You don't have any tasks yet. "
                "Create some tasks to get personalized daily planning suggestions!"
            ),
            is_stub=True,
            task_count=0,
            message="No tasks available for daily planning",
        )

    tasks = listing.tasks
    is_stub = True
    if llm is None:
        plan = "Set OPENAI_API_KEY to generate AI-powered daily plans."
    else:
        prompt = (
            f"Based on these tasks:\n{_task_summary(tasks)}\n\n"
            "Generate a concise daily plan with 3-5 actionable suggestions for today. "
            "Focus on prioritization and time management."
        )
        try:
            plan = _complete(llm, prompt, PLAN_SYSTEM_PROMPT, PLAN_MAX_TOKENS)
            is_stub = False
        except LLMUnavailable as e:
            logger.warning("Daily plan failed user=%s: %s", requester_id, e)
            plan = "Error generating daily plan. Please try again later."

    message = (
        "Daily plan generated (stub mode - set OPENAI_API_KEY for AI-powered planning)"
        if is_stub
        else f"AI-generated daily plan based on {len(tasks)} task(s)"
    )
    return DailyPlan(plan=plan, is_stub=is_stub, task_count=len(tasks), message=message)
