"""LLM initialisation — single place to swap providers.

Supports two modes:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **OpenAI-compatible endpoint** — set ``LLM_BASE_URL`` to a vLLM (or
   similar) server exposing ``/v1/chat/completions``; ``ChatOpenAI`` works
   unchanged.
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_openai import ChatOpenAI

from knowledge_seeder.config import settings

logger = logging.getLogger(__name__)


def get_llm(temperature: float | None = None) -> ChatOpenAI:
    """Return the configured chat model.

    *temperature* defaults to ``settings.llm_temperature``.  A dummy API
    key (``"EMPTY"``) is used against a custom base URL because vLLM does
    not require authentication.
    """
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": settings.llm_temperature if temperature is None else temperature,
        "timeout": settings.llm_timeout_seconds,
    }

    if settings.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        # vLLM doesn't need a real key; LangChain requires a non-empty value.
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)


class ChatModelCompleter:
    """Adapt a LangChain chat model to the ``complete(prompt) -> str`` capability.

    One synchronous ``invoke`` per call; no streaming, no retries.
    """

    def __init__(self, llm: Any | None = None) -> None:
        self._llm = llm if llm is not None else get_llm()

    def complete(self, prompt: str) -> str:
        response = self._llm.invoke(prompt)
        return _content_text(response.content)


def _content_text(content: Any) -> str:
    """Flatten a message ``content`` (str or list of content blocks) to text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)
