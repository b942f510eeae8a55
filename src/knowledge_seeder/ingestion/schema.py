"""Schema validation for model-generated records.

A candidate either validates unchanged into a :class:`DomainRecord` or is
rejected as a whole; there is no field-by-field repair.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from knowledge_seeder.exceptions import RecordValidationError
from knowledge_seeder.ingestion.models import DomainRecord, RecordFailure

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = tuple(
    info.alias or to_camel(name) for name, info in DomainRecord.model_fields.items()
)


@dataclass
class ValidationOutcome:
    """Per-record results of validating one generated batch."""

    records: list[DomainRecord] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    rejected: list[RecordFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records) + len(self.rejected)


def validate(candidate: Any) -> DomainRecord:
    """Validate a single untyped candidate.

    Raises
    ------
    RecordValidationError
        When a required field is missing or has the wrong type.  The
        exception's ``errors`` lists every offending field, not just the
        first one.
    """
    try:
        return DomainRecord.model_validate(candidate)
    except ValidationError as exc:
        errors = [_format_error(err) for err in exc.errors()]
        raise RecordValidationError(
            f"record failed schema validation: {'; '.join(errors)}",
            errors=errors,
        ) from exc


def validate_batch(candidates: list[Any]) -> ValidationOutcome:
    """Validate every element of *candidates* independently.

    A failing element never invalidates its siblings; all failures are
    collected into :attr:`ValidationOutcome.rejected` in input order.
    ``indices[i]`` is the input position of ``records[i]``.
    """
    outcome = ValidationOutcome()
    for index, candidate in enumerate(candidates):
        try:
            record = validate(candidate)
        except RecordValidationError as exc:
            record_id = _candidate_id(candidate)
            logger.warning("Rejected candidate %d (id=%s): %s", index, record_id, exc)
            outcome.rejected.append(
                RecordFailure(index=index, record_id=record_id, stage="validate", reason=str(exc))
            )
        else:
            outcome.records.append(record)
            outcome.indices.append(index)
    return outcome


def _candidate_id(candidate: Any) -> str | None:
    if isinstance(candidate, dict) and isinstance(candidate.get("id"), str):
        return candidate["id"]
    return None


def _format_error(err: dict[str, Any]) -> str:
    loc = ".".join(str(part) for part in err.get("loc", ())) or "<record>"
    return f"{loc}: {err.get('msg', 'invalid')}"
