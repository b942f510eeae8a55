"""
Ingestion — synthesize, validate, summarize, embed and persist records.

This module is the ETL-like pipeline that turns language-model output
into embedded documents stored in a vector-searchable collection.
"""

from knowledge_seeder.ingestion.generator import GenerationBatch, RecordGenerator, TextCompleter
from knowledge_seeder.ingestion.models import (
    DomainRecord,
    RecordFailure,
    SeedMode,
    SeedReport,
    SummaryDocument,
)
from knowledge_seeder.ingestion.pipeline import SeedPipeline, build_pipeline
from knowledge_seeder.ingestion.schema import ValidationOutcome, validate, validate_batch
from knowledge_seeder.ingestion.summarizer import summarize

__all__ = [
    "DomainRecord",
    "GenerationBatch",
    "RecordFailure",
    "RecordGenerator",
    "SeedMode",
    "SeedPipeline",
    "SeedReport",
    "SummaryDocument",
    "TextCompleter",
    "ValidationOutcome",
    "build_pipeline",
    "summarize",
    "validate",
    "validate_batch",
]
