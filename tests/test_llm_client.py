# tests/test_llm_client.py

from __future__ import annotations

from types import SimpleNamespace

import openai
import pytest

from worklog.cli.bootstrap import create_initial_state
from worklog.core.errors import LLMUnavailable
from worklog.llm.client import OpenAILLMClient


def _chunk(text: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class _FakeCompletions:
    def __init__(self, chunks=None, error: Exception | None = None) -> None:
        self.chunks = chunks or []
        self.error = error
        self.kwargs: dict | None = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return iter(self.chunks)


def _client(completions: _FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_missing_key_refuses_to_build(settings) -> None:
    with pytest.raises(RuntimeError, match="API key is not set"):
        OpenAILLMClient(settings)


def test_stream_chat_yields_content_chunks(settings) -> None:
    settings.openai_api_key = "sk-test"
    completions = _FakeCompletions([_chunk("Hello"), _chunk(None), _chunk(" world")])
    llm = OpenAILLMClient(settings, client=_client(completions))

    text = "".join(llm.stream_chat([{"role": "user", "content": "hi"}], "be brief", max_tokens=150))

    assert text == "Hello world"
    assert completions.kwargs["model"] == "gpt-3.5-turbo"
    assert completions.kwargs["max_tokens"] == 150
    assert completions.kwargs["temperature"] == 0.7
    assert completions.kwargs["stream"] is True
    assert completions.kwargs["messages"] == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "hi"},
    ]


def test_provider_error_becomes_llm_unavailable(settings) -> None:
    settings.openai_api_key = "sk-test"
    completions = _FakeCompletions(error=openai.OpenAIError("quota exceeded"))
    llm = OpenAILLMClient(settings, client=_client(completions))

    with pytest.raises(LLMUnavailable, match="quota exceeded") as exc_info:
        list(llm.stream_chat([], "sys"))
    assert isinstance(exc_info.value.__cause__, openai.OpenAIError)


def test_empty_stream_is_llm_unavailable(settings) -> None:
    settings.openai_api_key = "sk-test"
    llm = OpenAILLMClient(settings, client=_client(_FakeCompletions([_chunk(None)])))
    with pytest.raises(LLMUnavailable, match="no content"):
        list(llm.stream_chat([], "sys"))


def test_bootstrap_wires_client_when_key_is_set(settings) -> None:
    settings.openai_api_key = "sk-test"
    state = create_initial_state(settings=settings)
    assert isinstance(state.llm, OpenAILLMClient)
