"""Abstract store gateway.

Adding a new backend only requires subclassing :class:`StoreGateway`,
:class:`ScopedConnection` and :class:`CollectionHandle`.  The seed
pipeline is backend-agnostic.

The contract is deliberately small: a collection handle can only be
cleared or appended to.  Search belongs to the chat backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from knowledge_seeder.exceptions import WriteError


class CollectionHandle(ABC):
    """Write-side handle to one collection and its vector index.

    Parameters
    ----------
    name:
        Collection name.
    index_name:
        Name of the vector index bound to the collection.
    dimensions:
        Declared vector dimensionality of the index.
    """

    def __init__(self, name: str, *, index_name: str, dimensions: int) -> None:
        self.name = name
        self.index_name = index_name
        self.dimensions = dimensions

    @abstractmethod
    def delete_all(self) -> int:
        """Remove every document; return how many were removed."""
        ...

    @abstractmethod
    def insert_with_vector(
        self,
        document: dict[str, Any],
        vector_field: str,
        text_field: str,
        index_name: str,
    ) -> str:
        """Insert one document atomically and return its store id.

        *document* must carry the text under *text_field*, the vector
        under *vector_field*, and the source record under ``"metadata"``.
        Nothing is persisted when any part is missing.
        """
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of documents currently stored."""
        ...

    def split_document(
        self,
        document: dict[str, Any],
        vector_field: str,
        text_field: str,
        index_name: str,
    ) -> tuple[str, list[float], dict[str, Any]]:
        """Check an insert payload and return ``(text, vector, metadata)``.

        Raises
        ------
        WriteError
            On a foreign index name, a missing or mistyped text/vector, or
            a vector whose length differs from :attr:`dimensions`.
        """
        if index_name != self.index_name:
            raise WriteError(
                f"collection {self.name!r} is bound to index {self.index_name!r}, not {index_name!r}"
            )
        text = document.get(text_field)
        vector = document.get(vector_field)
        if not isinstance(text, str):
            raise WriteError(f"document has no text under {text_field!r}")
        if not isinstance(vector, list) or not vector:
            raise WriteError(f"document has no vector under {vector_field!r}")
        if len(vector) != self.dimensions:
            raise WriteError(
                f"vector has {len(vector)} dimensions, index {self.index_name!r} expects {self.dimensions}"
            )
        metadata = document.get("metadata") or {}
        return text, [float(v) for v in vector], dict(metadata)


class ScopedConnection(ABC):
    """A live, verified connection.  :meth:`close` is idempotent."""

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    def collection(self, name: str, *, index_name: str, dimensions: int) -> CollectionHandle:
        """Return a handle to collection *name*, creating it if needed.

        Raises :class:`~knowledge_seeder.exceptions.IndexMismatchError` when
        an existing collection is bound to another index or dimensionality.
        """
        ...

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    def _release(self) -> None:
        """Backend-specific teardown, called exactly once."""


class StoreGateway(ABC):
    """Factory for verified store connections."""

    @abstractmethod
    def connect(self) -> ScopedConnection:
        """Open a connection and run a liveness check.

        Raises
        ------
        StoreConnectionError
            When the store is unreachable or the check fails.
        """
        ...

    @contextmanager
    def acquire(self) -> Iterator[ScopedConnection]:
        """Scoped acquisition: the connection is closed on every exit path."""
        connection = self.connect()
        try:
            yield connection
        finally:
            connection.close()
