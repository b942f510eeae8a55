"""In-memory conversation threads for the chat backend."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class Turn:
    """One message in a conversation (``role`` is ``"user"`` or ``"agent"``)."""

    role: str
    content: str


class ThreadStore:
    """Thread id → ordered turns.  Ids are minted here, never by callers."""

    def __init__(self) -> None:
        self._threads: dict[str, list[Turn]] = {}
        self._lock = threading.Lock()

    def create(self) -> str:
        thread_id = uuid4().hex
        with self._lock:
            self._threads[thread_id] = []
        return thread_id

    def history(self, thread_id: str) -> list[Turn]:
        """Return a copy of the turns of *thread_id*; ``KeyError`` if unknown."""
        with self._lock:
            return list(self._threads[thread_id])

    def append(self, thread_id: str, *turns: Turn) -> None:
        with self._lock:
            self._threads[thread_id].extend(turns)

    def __contains__(self, thread_id: object) -> bool:
        with self._lock:
            return thread_id in self._threads

    def __len__(self) -> int:
        with self._lock:
            return len(self._threads)
