"""Seed pipeline: generate, summarize, embed and persist domain records.

One run is a linear sequence of stages::

    connect → (clear, replace mode only) → generate → validate
            → for each valid record: summarize → embed → write
            → disconnect

The per-record loop is sequential.  A record that fails to embed or write
is recorded in the :class:`SeedReport` and the loop moves on; only
connection, index-mismatch and generation failures abort the run.  A
mismatch is detected before the clear.  The connection is released on
every exit path.

Runs provide no mutual exclusion: two concurrent ``replace`` runs against
the same collection race each other's clear and inserts, so callers must
serialize them.

Usage::

    from knowledge_seeder.ingestion.pipeline import build_pipeline

    report = build_pipeline().seed("replace", 10)
    print(report.summary_line())
"""

from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from knowledge_seeder.config import settings
from knowledge_seeder.exceptions import EmbeddingError, WriteError
from knowledge_seeder.ingestion.generator import RecordGenerator
from knowledge_seeder.ingestion.models import (
    DomainRecord,
    RecordFailure,
    SeedMode,
    SeedReport,
    SummaryDocument,
)
from knowledge_seeder.ingestion.summarizer import summarize
from knowledge_seeder.providers.embeddings import TextEmbedder
from knowledge_seeder.store.base import CollectionHandle, StoreGateway

logger = logging.getLogger(__name__)


class SeedPipeline:
    """Orchestrates one seeding run against a single collection.

    Parameters
    ----------
    generator:
        Produces validated records from the language model.
    embedder:
        The ``embed(text) -> vector`` capability.
    gateway:
        Source of scoped store connections.
    collection_name / index_name:
        Target collection and the vector index bound to it.
    text_key / embedding_key:
        Field keys under which the summary text and vector are written.
    dimensions:
        Declared dimensionality of the index; a vector of any other
        length is an embedding failure for that record.
    """

    def __init__(
        self,
        generator: RecordGenerator,
        embedder: TextEmbedder,
        gateway: StoreGateway,
        *,
        collection_name: str = settings.chroma_collection,
        index_name: str = settings.vector_index_name,
        text_key: str = settings.text_key,
        embedding_key: str = settings.embedding_key,
        dimensions: int = settings.embedding_dimensions,
    ) -> None:
        self._generator = generator
        self._embedder = embedder
        self._gateway = gateway
        self.collection_name = collection_name
        self.index_name = index_name
        self.text_key = text_key
        self.embedding_key = embedding_key
        self.dimensions = dimensions

    def seed(self, mode: SeedMode | str, count: int) -> SeedReport:
        """Run one seeding pass and return its report.

        Raises
        ------
        ValueError
            For an unknown *mode* or a non-positive *count*.
        StoreConnectionError
            When the store cannot be reached.
        IndexMismatchError
            When the collection is bound to another index or dimensionality;
            raised before anything is cleared.
        GenerationError
            When the model yields no usable records.
        """
        mode = SeedMode(mode)
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValueError(f"count must be a positive integer, got {count!r}")

        report = SeedReport(mode=mode, collection=self.collection_name, requested=count)
        t0 = time.monotonic()

        with self._gateway.acquire() as connection:
            collection = connection.collection(
                self.collection_name,
                index_name=self.index_name,
                dimensions=self.dimensions,
            )

            if mode is SeedMode.REPLACE:
                report.cleared = collection.delete_all()

            batch = self._generator.generate_batch(count)
            report.generated = batch.raw_count
            report.validated = len(batch.records)
            report.failures.extend(batch.rejected)

            for index, record in zip(batch.indices, batch.records):
                failure = self._process_record(collection, index, record, report)
                if failure is not None:
                    report.failures.append(failure)

        elapsed = time.monotonic() - t0
        logger.info("Seeding completed in %.1fs: %s", elapsed, report.summary_line())
        return report

    def _process_record(
        self,
        collection: CollectionHandle,
        index: int,
        record: DomainRecord,
        report: SeedReport,
    ) -> RecordFailure | None:
        """Summarize → embed → write one record; never raises for per-record errors."""
        text = summarize(record)
        try:
            document = self._embed(record, text)
        except EmbeddingError as exc:
            logger.warning("Embedding failed for record %s: %s", record.record_id, exc)
            return RecordFailure(index=index, record_id=record.record_id, stage="embed", reason=str(exc))

        try:
            doc_id = collection.insert_with_vector(
                document.to_store_document(text_key=self.text_key, embedding_key=self.embedding_key),
                self.embedding_key,
                self.text_key,
                self.index_name,
            )
        except Exception as exc:
            logger.warning("Write failed for record %s: %s", record.record_id, exc)
            reason = str(exc) if isinstance(exc, WriteError) else f"{type(exc).__name__}: {exc}"
            return RecordFailure(index=index, record_id=record.record_id, stage="write", reason=reason)

        report.written += 1
        report.written_ids.append(doc_id)
        logger.info("Successfully processed & saved record: %s", record.record_id)
        return None

    def _embed(self, record: DomainRecord, text: str) -> SummaryDocument:
        try:
            vector = self._embedder.embed(text)
        except Exception as exc:
            raise EmbeddingError(f"{type(exc).__name__}: {exc}") from exc
        try:
            document = SummaryDocument(
                source_record=record, embedding_text=text, embedding_vector=vector
            )
        except ValidationError as exc:
            raise EmbeddingError(f"embedder returned a malformed vector: {exc}") from exc
        if len(document.embedding_vector) != self.dimensions:
            raise EmbeddingError(
                f"embedding has {len(document.embedding_vector)} dimensions, "
                f"index expects {self.dimensions}"
            )
        return document


def build_pipeline(*, collection_name: str | None = None) -> SeedPipeline:
    """Wire a :class:`SeedPipeline` from the production providers in ``settings``."""
    from knowledge_seeder.providers.embeddings import LangChainEmbedder
    from knowledge_seeder.providers.llm import ChatModelCompleter
    from knowledge_seeder.store.chroma_store import ChromaStoreGateway

    return SeedPipeline(
        RecordGenerator(ChatModelCompleter()),
        LangChainEmbedder(),
        ChromaStoreGateway(),
        collection_name=collection_name or settings.chroma_collection,
    )
