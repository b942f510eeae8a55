"""Headless chat client holding one conversation.

Any backend failure becomes a single fallback reply in the transcript; the
session itself stays usable so the user can retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests

from knowledge_seeder.config import settings

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Sorry, there was an error."


@dataclass(frozen=True)
class ChatMessage:
    sender: str
    text: str


@dataclass
class ChatSession:
    """A conversation against the ``/chat`` API.

    Attributes
    ----------
    thread_id:
        ``None`` until the backend mints one on the first successful turn.
    messages:
        Local transcript, user and agent turns interleaved.
    """

    base_url: str = settings.chat_api_url
    timeout: float = settings.chat_timeout_seconds
    thread_id: str | None = None
    messages: list[ChatMessage] = field(default_factory=list)

    @property
    def url(self) -> str:
        base = self.base_url.rstrip("/")
        return f"{base}/chat/{self.thread_id}" if self.thread_id else f"{base}/chat"

    def send(self, message: str) -> str | None:
        """Send one user turn and return the agent's reply.

        Blank input is ignored and returns ``None``.
        """
        trimmed = message.strip()
        if not trimmed:
            return None

        self.messages.append(ChatMessage("user", trimmed))
        try:
            resp = requests.post(self.url, json={"message": trimmed}, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
            reply = data["response"]
            if not isinstance(reply, str):
                raise TypeError(f"response is {type(reply).__name__}, expected str")
        except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
            logger.warning("Error sending message: %s", exc)
            reply = FALLBACK_MESSAGE
        else:
            if self.thread_id is None and data.get("threadId"):
                self.thread_id = data["threadId"]

        self.messages.append(ChatMessage("agent", reply))
        return reply

    def reset(self) -> None:
        """Forget the thread and transcript; the next turn starts a new conversation."""
        self.thread_id = None
        self.messages.clear()
