"""Chroma implementation of the store gateway.

Each insert becomes one Chroma record: the summary text goes in the
``documents`` slot, the vector in the ``embeddings`` slot and the source
record in ``metadatas``.  Chroma metadata values must be flat
str/int/float/bool, so list fields are JSON-encoded and their keys listed
under :data:`LIST_FIELDS_KEY`; :func:`decode_metadata` reverses this.

Ids are fresh UUIDs, so re-seeding in append mode duplicates logical
records instead of overwriting them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any
from uuid import uuid4

import chromadb

from knowledge_seeder.config import settings
from knowledge_seeder.exceptions import IndexMismatchError, StoreConnectionError, WriteError
from knowledge_seeder.store.base import CollectionHandle, ScopedConnection, StoreGateway

logger = logging.getLogger(__name__)

LIST_FIELDS_KEY = "_list_fields"
INDEX_NAME_KEY = "index_name"


def encode_metadata(record: dict[str, Any], *, index_name: str) -> dict[str, Any]:
    """Flatten a source record into Chroma-compatible metadata."""
    meta: dict[str, Any] = {INDEX_NAME_KEY: index_name}
    list_fields: list[str] = []
    for key, value in record.items():
        if isinstance(value, (list, tuple, dict)):
            meta[key] = json.dumps(value, ensure_ascii=False)
            list_fields.append(key)
        elif value is None:
            continue
        else:
            meta[key] = value
    meta[LIST_FIELDS_KEY] = ",".join(list_fields)
    return meta


def decode_metadata(meta: dict[str, Any]) -> dict[str, Any]:
    """Restore the source record stored by :func:`encode_metadata`."""
    encoded = {k for k in str(meta.get(LIST_FIELDS_KEY, "")).split(",") if k}
    record: dict[str, Any] = {}
    for key, value in meta.items():
        if key in (LIST_FIELDS_KEY, INDEX_NAME_KEY):
            continue
        record[key] = json.loads(value) if key in encoded else value
    return record


class ChromaCollection(CollectionHandle):
    """Write-side wrapper around a ``chromadb`` collection."""

    def __init__(self, collection: Any, *, index_name: str, dimensions: int) -> None:
        super().__init__(collection.name, index_name=index_name, dimensions=dimensions)
        self._collection = collection

    def delete_all(self) -> int:
        ids = self._collection.get(include=[]).get("ids", [])
        if ids:
            self._collection.delete(ids=ids)
        logger.info("Cleared %d documents from collection %r", len(ids), self.name)
        return len(ids)

    def insert_with_vector(
        self,
        document: dict[str, Any],
        vector_field: str,
        text_field: str,
        index_name: str,
    ) -> str:
        text, vector, record = self.split_document(document, vector_field, text_field, index_name)
        doc_id = uuid4().hex
        try:
            self._collection.add(
                ids=[doc_id],
                embeddings=[vector],
                documents=[text],
                metadatas=[encode_metadata(record, index_name=index_name)],
            )
        except Exception as exc:
            raise WriteError(f"insert into {self.name!r} failed: {exc}") from exc
        return doc_id

    def count(self) -> int:
        return self._collection.count()


class ChromaConnection(ScopedConnection):
    """A heartbeat-verified Chroma client."""

    def __init__(self, client: Any, *, distance_metric: str = "cosine") -> None:
        super().__init__()
        self._client = client
        self._distance_metric = distance_metric

    def collection(self, name: str, *, index_name: str, dimensions: int) -> ChromaCollection:
        if self.closed:
            raise StoreConnectionError("connection is closed")
        collection = self._client.get_or_create_collection(
            name=name,
            embedding_function=None,
            metadata={
                INDEX_NAME_KEY: index_name,
                "embedding_dim": dimensions,
                "hnsw:space": self._distance_metric,
            },
        )
        existing = collection.metadata or {}
        bound_index = existing.get(INDEX_NAME_KEY, index_name)
        bound_dim = int(existing.get("embedding_dim", dimensions))
        if (bound_index, bound_dim) != (index_name, dimensions):
            raise IndexMismatchError(
                f"collection {name!r} is bound to index {bound_index!r} (dim={bound_dim}), "
                f"configured {index_name!r} (dim={dimensions})"
            )
        return ChromaCollection(collection, index_name=index_name, dimensions=dimensions)

    def _release(self) -> None:
        self._client = None
        logger.info("Disconnected from Chroma")


class ChromaStoreGateway(StoreGateway):
    """Gateway producing verified :class:`ChromaConnection` objects.

    Parameters
    ----------
    host / port:
        Chroma server location.
    distance_metric:
        Distance function for newly created collections
        (``cosine`` | ``l2`` | ``ip``).
    client_factory:
        Zero-argument callable returning a client; defaults to
        ``chromadb.HttpClient(host=host, port=port)``.
    """

    def __init__(
        self,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        distance_metric: str = settings.distance_metric,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._distance_metric = distance_metric
        self._client_factory = client_factory or (lambda: chromadb.HttpClient(host=host, port=port))

    def connect(self) -> ChromaConnection:
        try:
            client = self._client_factory()
            client.heartbeat()
        except Exception as exc:
            logger.error("Could not reach Chroma at %s:%d", self._host, self._port)
            raise StoreConnectionError(
                f"Chroma at {self._host}:{self._port} is unreachable: {exc}"
            ) from exc
        logger.info("Pinged Chroma at %s:%d", self._host, self._port)
        return ChromaConnection(client, distance_metric=self._distance_metric)
