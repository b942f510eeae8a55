"""
Store — scoped connections and write-side collection handles.

Public surface
--------------
- :class:`StoreGateway` / :class:`ScopedConnection` / :class:`CollectionHandle` — abstract backend.
- :class:`ChromaStoreGateway` — default Chroma backend (lazy import).
"""

from knowledge_seeder.store.base import CollectionHandle, ScopedConnection, StoreGateway

__all__ = [
    "ChromaStoreGateway",
    "CollectionHandle",
    "ScopedConnection",
    "StoreGateway",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaStoreGateway to avoid pulling in chromadb at import time."""
    if name == "ChromaStoreGateway":
        from knowledge_seeder.store.chroma_store import ChromaStoreGateway

        return ChromaStoreGateway
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
