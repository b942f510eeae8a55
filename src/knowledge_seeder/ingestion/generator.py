"""Synthetic record generation backed by a language model.

The model is reached only through the :class:`TextCompleter` capability,
so tests substitute a deterministic stub and production injects
:class:`~knowledge_seeder.providers.llm.ChatModelCompleter`.

Usage::

    from knowledge_seeder.ingestion.generator import RecordGenerator
    from knowledge_seeder.providers.llm import ChatModelCompleter

    generator = RecordGenerator(ChatModelCompleter())
    records = generator.generate(10)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import JsonOutputParser

from knowledge_seeder.config import settings
from knowledge_seeder.exceptions import GenerationError
from knowledge_seeder.ingestion.models import DomainRecord, RecordBatch, RecordFailure
from knowledge_seeder.ingestion.prompts import build_generation_prompt
from knowledge_seeder.ingestion.schema import validate_batch

logger = logging.getLogger(__name__)


class TextCompleter(Protocol):
    """Single request/response language-model capability."""

    def complete(self, prompt: str) -> str:
        """Return the model's raw text answer to *prompt*."""
        ...


@dataclass
class GenerationBatch:
    """Validated output of one model call.

    ``indices`` holds the position of each valid record in the raw model
    output, so it lines up with the ``index`` of the rejected candidates.
    """

    requested: int
    raw_count: int
    records: list[DomainRecord] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    rejected: list[RecordFailure] = field(default_factory=list)


class RecordGenerator:
    """Ask the model for ``count`` records and validate what comes back.

    Parameters
    ----------
    completer:
        The language-model capability.
    domain:
        Subject the records describe (defaults to ``settings.target_domain``).
    """

    def __init__(self, completer: TextCompleter, *, domain: str | None = None) -> None:
        self._completer = completer
        self.domain = domain or settings.target_domain
        self._parser = JsonOutputParser(pydantic_object=RecordBatch)

    @property
    def format_instructions(self) -> str:
        return self._parser.get_format_instructions()

    def build_prompt(self, count: int) -> str:
        return build_generation_prompt(count, self.domain, self.format_instructions)

    def generate(self, count: int) -> list[DomainRecord]:
        """Return the valid records from one model call, in model order."""
        return self.generate_batch(count).records

    def generate_batch(self, count: int) -> GenerationBatch:
        """Like :meth:`generate` but also reports the rejected candidates.

        Raises
        ------
        ValueError
            If *count* is not a positive integer.
        GenerationError
            If the model call fails, the answer is not a record container,
            or no candidate survives validation.
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValueError(f"count must be a positive integer, got {count!r}")

        prompt = self.build_prompt(count)
        logger.info("Generating %d synthetic records about %s", count, self.domain)
        try:
            raw = self._completer.complete(prompt)
        except Exception as exc:
            raise GenerationError(f"language model call failed: {exc}") from exc

        candidates = self._extract_candidates(raw)
        outcome = validate_batch(candidates)
        if len(candidates) != count:
            logger.info("Model returned %d candidates (requested %d)", len(candidates), count)

        if not outcome.records:
            raise GenerationError(
                f"none of the {len(candidates)} generated candidates passed validation",
                rejected=outcome.rejected,
            )

        logger.info(
            "Generated %d valid records (%d rejected)", len(outcome.records), len(outcome.rejected)
        )
        return GenerationBatch(
            requested=count,
            raw_count=len(candidates),
            records=outcome.records,
            indices=outcome.indices,
            rejected=outcome.rejected,
        )

    def _extract_candidates(self, raw: str) -> list[Any]:
        """Parse the raw answer into the list of untyped candidates."""
        try:
            parsed = self._parser.parse(raw)
        except OutputParserException as exc:
            logger.error("Unparsable model output: %.200s", raw)
            raise GenerationError(f"model output is not valid JSON: {exc}") from exc
        if parsed is None:
            raise GenerationError("model output is not valid JSON")

        if isinstance(parsed, dict) and isinstance(parsed.get("records"), list):
            return parsed["records"]
        if isinstance(parsed, list):
            return parsed
        raise GenerationError(
            f"expected a JSON object with a 'records' array or a JSON array, got {type(parsed).__name__}"
        )
