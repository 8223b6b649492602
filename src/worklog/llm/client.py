# src/worklog/llm/client.py

from __future__ import annotations

import logging
import time
from typing import Any, Iterable

import openai
from openai import OpenAI

from ..core.errors import LLMUnavailable
from ..core.ports import ChatMessage

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7


def _close_stream(stream: Any) -> None:
    """Best-effort close for streaming responses (not every SDK version has close())."""
    close = getattr(stream, "close", None)
    if callable(close):
        close()


def _chunk_text(chunk: Any) -> str | None:
    choices = getattr(chunk, "choices", None) or []
    if not choices:
        return None
    delta = getattr(choices[0], "delta", None)
    return getattr(delta, "content", None) if delta is not None else None


class OpenAILLMClient:
    """
    OpenAI chat completions behind the LLMClient port.

    Construction fails with RuntimeError when no API key is configured, so the
    composition root can fall back to stub mode. Provider errors during a call
    surface as LLMUnavailable.
    """

    def __init__(self, settings: Any, *, client: OpenAI | None = None) -> None:
        api_key = getattr(settings, "openai_api_key", None)
        if not api_key or not str(api_key).strip():
            raise RuntimeError("LLM API key is not set. Set WORKLOG_OPENAI_API_KEY or OPENAI_API_KEY.")

        self.model = str(getattr(settings, "llm_model", "") or "gpt-3.5-turbo")
        self.timeout = float(getattr(settings, "llm_timeout_seconds", 30.0))

        if client is None:
            base_url = str(getattr(settings, "openai_base_url", "") or "").strip()
            # No automatic retries: a slow provider should fail the command, not hang it.
            client = OpenAI(
                api_key=str(api_key),
                base_url=base_url or None,
                timeout=self.timeout,
                max_retries=0,
            )
        self._client = client

    def stream_chat(
            self,
            messages: list[ChatMessage],
            system_prompt: str,
            *,
            max_tokens: int | None = None,
    ) -> Iterable[str]:
        logger.info("LLM: requesting model=%s max_tokens=%s", self.model, max_tokens)
        t0 = time.monotonic()
        stream = None
        used_any = False
        try:
            stream = self._client.chat.completions.create(
                model=self.model,
                stream=True,
                messages=[{"role": "system", "content": system_prompt}, *messages],
                max_tokens=max_tokens,
                temperature=TEMPERATURE,
            )
            for chunk in stream:
                content = _chunk_text(chunk)
                if content:
                    if not used_any:
                        logger.info("LLM: first token from model=%s (%.2fs)", self.model, time.monotonic() - t0)
                    used_any = True
                    yield content
        except openai.OpenAIError as e:
            raise LLMUnavailable(f"{e.__class__.__name__}: {e}") from e
        finally:
            if stream is not None:
                _close_stream(stream)

        if not used_any:
            raise LLMUnavailable(f"Model returned no content: {self.model}")
        logger.debug("LLM: completed with model=%s", self.model)
