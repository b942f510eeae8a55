"""Default chat responder: vector search over the seeded collection + LLM reply.

This is plain glue around the collection written by the seed pipeline;
no ranking beyond Chroma's own nearest-neighbour order is applied.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import chromadb
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from knowledge_seeder.config import settings
from knowledge_seeder.serving.threads import Turn

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a helpful assistant that answers questions about {domain} using the
provided context. If the context does not contain enough information, say so
honestly. Refer to records by name when you use them.
"""


class Responder(Protocol):
    """Produce the agent reply for *message* given the prior turns."""

    def __call__(self, history: list[Turn], message: str) -> str:
        ...


def build_chat_prompt(
    history: list[Turn],
    message: str,
    context: list[str],
    *,
    domain: str,
) -> list[BaseMessage]:
    """Assemble system prompt, retrieved context, prior turns and the new message."""
    system = SYSTEM_PROMPT.format(domain=domain)
    if context:
        system += "\nContext:\n" + "\n\n---\n\n".join(context)
    messages: list[BaseMessage] = [SystemMessage(content=system)]
    for turn in history:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.content))
        else:
            messages.append(AIMessage(content=turn.content))
    messages.append(HumanMessage(content=message))
    return messages


class RetrievalResponder:
    """Embed the message, fetch the top-*k* summaries and ask the chat model.

    Providers and the Chroma client are created on first use so that the
    FastAPI app can be imported without credentials.
    """

    def __init__(
        self,
        *,
        k: int = 5,
        llm: Any | None = None,
        embedder: Any | None = None,
        client: Any | None = None,
        collection_name: str = settings.chroma_collection,
    ) -> None:
        self.k = k
        self._llm = llm
        self._embedder = embedder
        self._client = client
        self.collection_name = collection_name

    def __call__(self, history: list[Turn], message: str) -> str:
        context = self.search(message)
        prompt = build_chat_prompt(history, message, context, domain=settings.target_domain)
        response = self._get_llm().invoke(prompt)
        return response.content if isinstance(response.content, str) else str(response.content)

    def search(self, query: str) -> list[str]:
        """Return the summary texts nearest to *query*."""
        embedding = self._get_embedder().embed(query)
        collection = self._get_client().get_or_create_collection(
            self.collection_name, embedding_function=None
        )
        results = collection.query(
            query_embeddings=[embedding],
            n_results=self.k,
            include=["documents"],
        )
        docs = results.get("documents") or [[]]
        hits = [doc for doc in docs[0] if doc]
        logger.info("Retrieved %d summaries for chat query", len(hits))
        return hits

    def _get_llm(self) -> Any:
        if self._llm is None:
            from knowledge_seeder.providers.llm import get_llm

            self._llm = get_llm(temperature=0.0)
        return self._llm

    def _get_embedder(self) -> Any:
        if self._embedder is None:
            from knowledge_seeder.providers.embeddings import LangChainEmbedder

            self._embedder = LangChainEmbedder()
        return self._embedder

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = chromadb.HttpClient(host=settings.chroma_host, port=settings.chroma_port)
        return self._client
