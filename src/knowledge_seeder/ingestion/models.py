"""Domain models for synthesized records, stored documents and run reports."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DomainRecord(BaseModel):
    """One structured unit of synthesized knowledge.

    Validation is strict: every field is required and no type coercion is
    performed (a number is never stringified into ``name``).  Unknown keys
    are ignored.  Field names on the wire are camelCase
    (``keyConcepts``, ``designGuidelines``, …); use
    ``model_dump(by_alias=True)`` to reproduce them.

    Attributes
    ----------
    record_id:
        Identifier assigned by the caller or the model (wire key ``id``).
        Unique within one seeding run only.
    key_concepts, design_guidelines, common_pitfalls, best_practices, relevant_technologies:
        Ordered string lists; order reflects model emphasis and is kept.
    """

    model_config = ConfigDict(
        strict=True,
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
    )

    record_id: str = Field(alias="id")
    name: str
    description: str
    key_concepts: list[str]
    design_guidelines: list[str]
    common_pitfalls: list[str]
    best_practices: list[str]
    relevant_technologies: list[str]
    notes: str


class RecordBatch(BaseModel):
    """Container shape the language model is asked to emit."""

    records: list[DomainRecord]


class SeedMode(str, Enum):
    """Whether a seeding run clears the collection first."""

    REPLACE = "replace"
    APPEND = "append"


class SummaryDocument(BaseModel):
    """A record together with its derived text and embedding, as persisted.

    ``embedding_vector`` is always computed from exactly
    ``embedding_text`` of the same instance.
    """

    model_config = ConfigDict(frozen=True)

    source_record: DomainRecord
    embedding_text: str
    embedding_vector: list[float]

    def to_store_document(self, *, text_key: str, embedding_key: str) -> dict[str, Any]:
        """Flatten into the single insert payload written to the store."""
        return {
            text_key: self.embedding_text,
            embedding_key: list(self.embedding_vector),
            "metadata": self.source_record.model_dump(by_alias=True),
        }


class RecordFailure(BaseModel):
    """Outcome of a record that did not make it into the collection.

    ``index`` is the record's position in the raw model output for every
    stage, so a validate failure and an embed failure never share one.
    """

    index: int
    record_id: str | None = None
    stage: str
    reason: str


class SeedReport(BaseModel):
    """Summary of one seeding run.

    A run that returns a report is a successful run even when
    :attr:`failures` is non-empty; fatal errors raise instead.
    """

    mode: SeedMode
    collection: str
    requested: int
    generated: int = 0
    validated: int = 0
    written: int = 0
    cleared: int = 0
    failures: list[RecordFailure] = Field(default_factory=list)
    written_ids: list[str] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def summary_line(self) -> str:
        """Return a compact one-line description of the run."""
        return (
            f"[{self.mode.value}] {self.collection}: requested={self.requested} "
            f"generated={self.generated} validated={self.validated} "
            f"written={self.written} failed={self.failed}"
        )
