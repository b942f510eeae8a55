"""Unit tests for the Chroma store gateway, run against a fake client."""

from __future__ import annotations

import pytest

from conftest import DIM, FakeChromaClient, RecordingGateway
from knowledge_seeder.exceptions import IndexMismatchError, StoreConnectionError, WriteError
from knowledge_seeder.store.chroma_store import (
    LIST_FIELDS_KEY,
    ChromaStoreGateway,
    decode_metadata,
    encode_metadata,
)


def _document(text: str = "summary", vector: list[float] | None = None, **meta) -> dict:
    return {
        "embedding_text": text,
        "embedding": vector if vector is not None else [0.5] * DIM,
        "metadata": {"id": "p1", "keyConcepts": ["A", "B"], "notes": "", **meta},
    }


class TestMetadataCodec:
    def test_lists_are_json_encoded(self) -> None:
        meta = encode_metadata({"id": "p1", "keyConcepts": ["A", "B"], "notes": "n"}, index_name="idx")
        assert meta["keyConcepts"] == '["A", "B"]'
        assert meta["index_name"] == "idx"
        assert meta[LIST_FIELDS_KEY] == "keyConcepts"
        assert all(isinstance(v, (str, int, float, bool)) for v in meta.values())

    def test_round_trip_keeps_list_order_and_strings(self) -> None:
        record = {"id": "p1", "description": "[not a list]", "bestPractices": ["z", "a", "m"], "commonPitfalls": []}
        assert decode_metadata(encode_metadata(record, index_name="idx")) == record


class TestGateway:
    def test_acquire_pings_and_releases(self, gateway: RecordingGateway) -> None:
        with gateway.acquire() as connection:
            assert not connection.closed
        assert connection.closed
        assert gateway.client.heartbeats == 1

    def test_release_on_error(self, gateway: RecordingGateway) -> None:
        with pytest.raises(RuntimeError):
            with gateway.acquire():
                raise RuntimeError("boom")
        assert gateway.connections[0].closed

    def test_close_is_idempotent(self, gateway: RecordingGateway) -> None:
        connection = gateway.connect()
        connection.close()
        connection.close()
        assert connection.closed

    def test_unreachable_client_factory(self) -> None:
        def refuse():
            raise OSError("no route to host")

        gateway = ChromaStoreGateway(host="nowhere", port=1, client_factory=refuse)
        with pytest.raises(StoreConnectionError, match="nowhere:1"):
            gateway.connect()

    def test_failed_heartbeat(self) -> None:
        gateway = RecordingGateway(FakeChromaClient(alive=False))
        with pytest.raises(StoreConnectionError) as excinfo:
            gateway.connect()
        assert isinstance(excinfo.value, ConnectionError)

    def test_closed_connection_refuses_collections(self, gateway: RecordingGateway) -> None:
        connection = gateway.connect()
        connection.close()
        with pytest.raises(StoreConnectionError):
            connection.collection("principles", index_name="vector_index", dimensions=DIM)

    @pytest.mark.parametrize(
        ("index_name", "dimensions"),
        [("other_index", DIM), ("vector_index", DIM * 2)],
    )
    def test_existing_collection_with_other_binding_is_refused(
        self, gateway: RecordingGateway, chroma_client: FakeChromaClient, index_name: str, dimensions: int
    ) -> None:
        chroma_client.get_or_create_collection(
            "principles", metadata={"index_name": "vector_index", "embedding_dim": DIM}
        )
        with gateway.acquire() as connection:
            with pytest.raises(IndexMismatchError, match="vector_index"):
                connection.collection("principles", index_name=index_name, dimensions=dimensions)


class TestCollectionHandle:
    @pytest.fixture()
    def handle(self, gateway: RecordingGateway):
        with gateway.acquire() as connection:
            yield connection.collection("principles", index_name="vector_index", dimensions=DIM)

    def test_collection_binds_index_metadata(self, handle, chroma_client: FakeChromaClient) -> None:
        meta = chroma_client.collections["principles"].metadata
        assert meta["index_name"] == "vector_index"
        assert meta["embedding_dim"] == DIM
        assert meta["hnsw:space"] == "cosine"
        assert handle.index_name == "vector_index"

    def test_insert_maps_fields_to_slots(self, handle, chroma_client: FakeChromaClient) -> None:
        doc_id = handle.insert_with_vector(_document("hello"), "embedding", "embedding_text", "vector_index")

        row = chroma_client.collections["principles"].rows[doc_id]
        assert row["document"] == "hello"
        assert row["embedding"] == [0.5] * DIM
        assert decode_metadata(row["metadata"])["keyConcepts"] == ["A", "B"]

    def test_inserts_never_overwrite(self, handle) -> None:
        first = handle.insert_with_vector(_document(), "embedding", "embedding_text", "vector_index")
        second = handle.insert_with_vector(_document(), "embedding", "embedding_text", "vector_index")
        assert first != second
        assert handle.count() == 2

    @pytest.mark.parametrize(
        ("document", "message"),
        [
            ({"embedding": [0.1] * DIM}, "no text"),
            ({"embedding_text": "t"}, "no vector"),
            ({"embedding_text": "t", "embedding": [0.1] * (DIM + 1)}, "dimensions"),
        ],
    )
    def test_partial_documents_are_rejected(self, handle, document: dict, message: str) -> None:
        with pytest.raises(WriteError, match=message):
            handle.insert_with_vector(document, "embedding", "embedding_text", "vector_index")
        assert handle.count() == 0

    def test_custom_field_keys(self, handle, chroma_client: FakeChromaClient) -> None:
        doc = {"body": "custom", "vec": [0.2] * DIM, "metadata": {"id": "p9"}}
        doc_id = handle.insert_with_vector(doc, "vec", "body", "vector_index")
        assert chroma_client.collections["principles"].rows[doc_id]["document"] == "custom"

    def test_delete_all(self, handle) -> None:
        for _ in range(3):
            handle.insert_with_vector(_document(), "embedding", "embedding_text", "vector_index")
        assert handle.delete_all() == 3
        assert handle.count() == 0
        assert handle.delete_all() == 0
