"""FastAPI chat backend over the seeded collection.

Wire contract::

    POST /chat               {"message": "..."} → {"threadId": "...", "response": "..."}
    POST /chat/{threadId}    {"message": "..."} → {"threadId": "...", "response": "..."}

A thread is minted on the first call and must be supplied on every later
call of the same conversation.

Serve the module-level ``app`` with any ASGI server, for example::

    pip install -e ".[serve]"
    uvicorn knowledge_seeder.serving.app:app --port 3000
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from knowledge_seeder.serving.responder import Responder, RetrievalResponder
from knowledge_seeder.serving.threads import ThreadStore, Turn

logger = logging.getLogger(__name__)


# ── Request / Response schemas ────────────────────────────────────────
class ChatRequest(BaseModel):
    """Incoming user turn."""

    message: str = Field(min_length=1)


class ChatResponse(BaseModel):
    """Agent reply, carrying the conversation's thread id."""

    model_config = ConfigDict(populate_by_name=True)

    thread_id: str = Field(alias="threadId")
    response: str


def create_app(
    responder: Responder | None = None,
    threads: ThreadStore | None = None,
) -> FastAPI:
    """Build the chat API around *responder* (defaults to :class:`RetrievalResponder`)."""
    responder = responder if responder is not None else RetrievalResponder()
    threads = threads if threads is not None else ThreadStore()

    app = FastAPI(
        title="Knowledge Seeder Chat API",
        version="0.1.0",
        description="Chat over records seeded into the vector store.",
    )

    def _reply(thread_id: str, message: str) -> ChatResponse:
        history = threads.history(thread_id)
        try:
            answer = responder(history, message)
        except Exception as exc:
            logger.exception("Responder failed for thread %s", thread_id)
            raise HTTPException(status_code=502, detail="Failed to generate a response") from exc
        threads.append(thread_id, Turn("user", message), Turn("agent", answer))
        return ChatResponse(thread_id=thread_id, response=answer)

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness check."""
        return {"status": "ok"}

    @app.post("/chat", response_model=ChatResponse)
    def start_chat(request: ChatRequest) -> ChatResponse:
        """Start a new conversation."""
        thread_id = threads.create()
        logger.info("Started thread %s", thread_id)
        return _reply(thread_id, request.message)

    @app.post("/chat/{thread_id}", response_model=ChatResponse)
    def continue_chat(thread_id: str, request: ChatRequest) -> ChatResponse:
        """Continue conversation *thread_id*."""
        if thread_id not in threads:
            raise HTTPException(status_code=404, detail=f"Unknown thread {thread_id!r}")
        return _reply(thread_id, request.message)

    app.state.threads = threads
    return app


app = create_app()
