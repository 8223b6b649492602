# tests/test_task_assistant.py

from __future__ import annotations

import pytest

from worklog.cli.commands import registry
from worklog.core.errors import InvalidInput
from worklog.tasks import task_assistant
from worklog.tasks.task_models import TaskStatus
from worklog.tasks.task_store import TaskStore

from .fakes import FailingLLMClient, FakeLLMClient


def test_suggest_description_stub_without_client() -> None:
    s = task_assistant.suggest_description("  Fix login  ", None)
    assert s.title == "Fix login"
    assert s.is_stub is True
    assert s.description.startswith("Task: Fix login\n\nThis is a placeholder description.")
    assert s.message.startswith("Description generated (stub mode")


def test_suggest_description_uses_llm() -> None:
    llm = FakeLLMClient("Add OAuth callback handling.")
    s = task_assistant.suggest_description("Fix login", llm)

    assert s.is_stub is False
    assert s.description == "Add OAuth callback handling."
    assert s.to_dict() == {
        "title": "Fix login",
        "description": "Add OAuth callback handling.",
        "isStub": False,
        "message": "AI-powered description generated successfully",
    }

    (messages, system_prompt, max_tokens), = llm.calls
    assert "sprint planning" in system_prompt
    assert messages == [
        {
            "role": "user",
            "content": (
                'Generate a clear, actionable description for this task: "Fix login". '
                "Keep it under 200 words and focus on what needs to be done."
            ),
        }
    ]
    assert max_tokens == task_assistant.DESCRIPTION_MAX_TOKENS


def test_suggest_description_provider_failure_falls_back_to_stub() -> None:
    s = task_assistant.suggest_description("Fix login", FailingLLMClient("rate limited"))
    assert s.is_stub is True
    assert s.description == "Task: Fix login\n\nError generating AI description: rate limited"


def test_suggest_description_requires_title() -> None:
    with pytest.raises(InvalidInput, match="title is required"):
        task_assistant.suggest_description("  ", FakeLLMClient())


def test_daily_plan_without_tasks(store: TaskStore) -> None:
    llm = FakeLLMClient()
    plan = task_assistant.daily_plan(store, "u1", llm)

    assert plan.is_stub is True
    assert plan.task_count == 0
    assert plan.message == "No tasks available for daily planning"
    assert plan.plan.startswith("You don't have any tasks yet.")
    assert llm.calls == []


def test_daily_plan_stub_without_client(store: TaskStore) -> None:
    store.add_task(user_id="u1", title="a")
    plan = task_assistant.daily_plan(store, "u1", None)
    assert plan.to_dict() == {
        "plan": "Set OPENAI_API_KEY to generate AI-powered daily plans.",
        "isStub": True,
        "taskCount": 1,
        "message": "Daily plan generated (stub mode - set OPENAI_API_KEY for AI-powered planning)",
    }


def test_daily_plan_summarizes_only_requester_tasks(store: TaskStore) -> None:
    store.add_task(user_id="u1", title="Review PR", status=TaskStatus.IN_PROGRESS, total_minutes=30)
    store.add_task(user_id="u1", title="Ship release", status=TaskStatus.DONE, total_minutes=90)
    store.add_task(user_id="u2", title="Not mine")

    llm = FakeLLMClient("1. Finish the review.")
    plan = task_assistant.daily_plan(store, "u1", llm)

    assert plan.is_stub is False
    assert plan.task_count == 2
    assert plan.plan == "1. Finish the review."
    assert plan.message == "AI-generated daily plan based on 2 task(s)"

    (messages, system_prompt, max_tokens), = llm.calls
    prompt = messages[0]["content"]
    assert "- Review PR (in_progress, 30min)" in prompt
    assert "- Ship release (done, 90min)" in prompt
    assert "Not mine" not in prompt
    assert "daily planning" in system_prompt
    assert max_tokens == task_assistant.PLAN_MAX_TOKENS


def test_daily_plan_provider_failure_falls_back_to_stub(store: TaskStore) -> None:
    store.add_task(user_id="u1", title="a")
    plan = task_assistant.daily_plan(store, "u1", FailingLLMClient())
    assert plan.is_stub is True
    assert plan.plan == "Error generating daily plan. Please try again later."
    assert plan.task_count == 1


def test_empty_llm_reply_is_reported_as_failure(store: TaskStore) -> None:
    s = task_assistant.suggest_description("Fix login", FakeLLMClient("   "))
    assert s.is_stub is True
    assert "Error generating AI description" in s.description


def test_plan_and_suggest_commands(state) -> None:
    assert "stub mode" in registry.handle(state, "/suggest Fix login")
    assert registry.handle(state, "/suggest") == "Usage: /suggest <title>"
    assert "You don't have any tasks yet." in registry.handle(state, "/plan")

    state.llm = FakeLLMClient("Start with the review.")
    registry.handle(state, "/new Review PR")
    reply = registry.handle(state, "/plan")
    assert reply == "AI-generated daily plan based on 1 task(s):\n\nStart with the review."
