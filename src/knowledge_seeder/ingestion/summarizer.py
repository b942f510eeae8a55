"""Project a validated record into the single text blob that gets embedded.

The segment order below is fixed: embeddings already stored in a
collection were computed from text in exactly this order, so changing it
makes new vectors incomparable with existing ones.
"""

from __future__ import annotations

from knowledge_seeder.ingestion.models import DomainRecord

LIST_SEPARATOR = ", "
SEGMENT_SEPARATOR = ". "


def summarize(record: DomainRecord) -> str:
    """Return the embedding text for *record*.

    Pure and deterministic, e.g.::

        Consistency (p1): .... Key Concepts: A, B. Design Guidelines: G1.
        Common Pitfalls: . Best Practices: BP1. Technologies: Tech1. Notes: n
    """
    segments = [
        f"{record.name} ({record.record_id}): {record.description}",
        _labelled("Key Concepts", record.key_concepts),
        _labelled("Design Guidelines", record.design_guidelines),
        _labelled("Common Pitfalls", record.common_pitfalls),
        _labelled("Best Practices", record.best_practices),
        _labelled("Technologies", record.relevant_technologies),
        f"Notes: {record.notes}",
    ]
    return SEGMENT_SEPARATOR.join(segments)


def _labelled(label: str, items: list[str]) -> str:
    return f"{label}: {LIST_SEPARATOR.join(items)}"
