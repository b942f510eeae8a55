"""Prompt templates for synthetic record generation.

Keeping prompts in one place makes them easy to audit, version, and A/B
test.
"""

from __future__ import annotations

from knowledge_seeder.ingestion.schema import REQUIRED_FIELDS

# ── Record generation ─────────────────────────────────────────────────

GENERATION_TEMPLATE = """\
You are a helpful assistant that generates data about {domain}.
Generate {count} fictional records of {domain}. Each record should include
the following fields: {fields}. Ensure variety in the data and realistic
values. Every list field must be a JSON array of strings (it may be empty)
and every other field must be a string.

Return the records inside the "records" array of a single JSON object.

{format_instructions}
"""


def build_generation_prompt(count: int, domain: str, format_instructions: str) -> str:
    """Build the single instruction sent to the model for ``count`` records."""
    return GENERATION_TEMPLATE.format(
        domain=domain,
        count=count,
        fields=", ".join(REQUIRED_FIELDS),
        format_instructions=format_instructions.strip(),
    )
