"""Shared pytest configuration and fixtures.

Every capability the pipeline talks to has an in-process fake here:

* :class:`FakeCompleter`: canned language-model answers;
* :class:`HashEmbedder`: vector = SHA-256 of the text, so a stored vector
  can be checked against its stored text;
* :class:`FakeChromaClient`: the subset of the ``chromadb`` client API
  that :mod:`knowledge_seeder.store.chroma_store` uses.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

import pytest

from knowledge_seeder.store.chroma_store import ChromaConnection, ChromaStoreGateway

DIM = 8


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Records ────────────────────────────────────────────────────────────


def make_record(i: int = 1, **overrides: Any) -> dict[str, Any]:
    """Return a valid wire-format record dict."""
    record = {
        "id": f"p{i}",
        "name": f"Principle {i}",
        "description": f"Description of principle {i}",
        "keyConcepts": [f"concept-{i}a", f"concept-{i}b"],
        "designGuidelines": [f"guideline-{i}"],
        "commonPitfalls": [],
        "bestPractices": [f"practice-{i}"],
        "relevantTechnologies": ["React", "CSS"],
        "notes": f"note {i}",
    }
    record.update(overrides)
    return record


# ── Language model ─────────────────────────────────────────────────────


class FakeCompleter:
    """Returns queued raw answers (or raises queued exceptions) in order."""

    def __init__(self, *answers: str | Exception) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []

    @classmethod
    def returning_records(cls, records: list[Any]) -> FakeCompleter:
        return cls(json.dumps({"records": records}))

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        answer = self._answers.pop(0) if len(self._answers) > 1 else self._answers[0]
        if isinstance(answer, Exception):
            raise answer
        return answer


# ── Embeddings ─────────────────────────────────────────────────────────


def hash_vector(text: str, dim: int = DIM) -> list[float]:
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [digest[i] / 255.0 for i in range(dim)]


class HashEmbedder:
    """Deterministic embedder; optionally fails on texts containing a marker."""

    def __init__(self, dim: int = DIM, fail_on: str | None = None) -> None:
        self.dim = dim
        self.fail_on = fail_on
        self.texts: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.texts.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise TimeoutError("embedding provider timed out")
        return hash_vector(text, self.dim)


# ── Chroma ─────────────────────────────────────────────────────────────


class FakeChromaCollection:
    def __init__(self, name: str, metadata: dict[str, Any] | None = None) -> None:
        self.name = name
        self.metadata = metadata
        self.rows: dict[str, dict[str, Any]] = {}
        self.fail_next_add: Exception | None = None

    def add(self, ids, embeddings, documents, metadatas) -> None:
        if self.fail_next_add is not None:
            exc, self.fail_next_add = self.fail_next_add, None
            raise exc
        assert len(ids) == len(embeddings) == len(documents) == len(metadatas)
        for doc_id, emb, doc, meta in zip(ids, embeddings, documents, metadatas):
            if doc_id in self.rows:
                raise ValueError(f"duplicate id {doc_id}")
            for key, value in meta.items():
                if not isinstance(value, (str, int, float, bool)):
                    raise ValueError(f"metadata {key!r} must be a flat value")
            self.rows[doc_id] = {"embedding": emb, "document": doc, "metadata": meta}

    def get(self, include=None) -> dict[str, Any]:
        return {"ids": list(self.rows)}

    def delete(self, ids) -> None:
        for doc_id in ids:
            self.rows.pop(doc_id, None)

    def count(self) -> int:
        return len(self.rows)

    def query(self, query_embeddings, n_results, include=None) -> dict[str, Any]:
        query = query_embeddings[0]
        ranked = sorted(
            self.rows.values(),
            key=lambda row: sum((a - b) ** 2 for a, b in zip(query, row["embedding"])),
        )[:n_results]
        return {"documents": [[row["document"] for row in ranked]]}


class FakeChromaClient:
    def __init__(self, *, alive: bool = True) -> None:
        self.alive = alive
        self.collections: dict[str, FakeChromaCollection] = {}
        self.heartbeats = 0

    def heartbeat(self) -> int:
        self.heartbeats += 1
        if not self.alive:
            raise ConnectionError("connection refused")
        return 1

    def get_or_create_collection(self, name, embedding_function=None, metadata=None):
        if name not in self.collections:
            self.collections[name] = FakeChromaCollection(name, metadata)
        return self.collections[name]


class RecordingGateway(ChromaStoreGateway):
    """Chroma gateway over a fake client that remembers every connection."""

    def __init__(self, client: FakeChromaClient) -> None:
        super().__init__(host="fake-chroma", port=8000, client_factory=lambda: client)
        self.client = client
        self.connections: list[ChromaConnection] = []

    def connect(self) -> ChromaConnection:
        connection = super().connect()
        self.connections.append(connection)
        return connection


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def chroma_client() -> FakeChromaClient:
    return FakeChromaClient()


@pytest.fixture()
def gateway(chroma_client: FakeChromaClient) -> RecordingGateway:
    return RecordingGateway(chroma_client)


@pytest.fixture()
def embedder() -> HashEmbedder:
    return HashEmbedder()
