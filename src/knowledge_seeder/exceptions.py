"""Exception hierarchy for seeding runs.

Fatal errors (:class:`StoreConnectionError`, :class:`IndexMismatchError`,
:class:`GenerationError`) propagate out of :meth:`SeedPipeline.seed`.  Per-record errors
(:class:`RecordValidationError`, :class:`EmbeddingError`,
:class:`WriteError`) are caught at the record loop and folded into the
:class:`~knowledge_seeder.ingestion.models.SeedReport`.
"""

from __future__ import annotations

from typing import Any


class SeedError(Exception):
    """Base class for every error raised by this package."""


class StoreConnectionError(SeedError, ConnectionError):
    """The document store is unreachable or failed its liveness check."""


class IndexMismatchError(SeedError):
    """The target collection is bound to a different index or dimensionality."""


class GenerationError(SeedError):
    """The model call failed, or its output yielded no usable records."""

    def __init__(self, message: str, *, rejected: list[Any] | None = None) -> None:
        super().__init__(message)
        self.rejected = rejected or []


class RecordValidationError(SeedError):
    """A candidate record does not conform to the ``DomainRecord`` schema."""

    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class EmbeddingError(SeedError):
    """The embedding capability failed for a single record."""


class WriteError(SeedError):
    """Persisting a single document failed."""
