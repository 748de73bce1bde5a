"""Section description generator with a templated fallback."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from conotate.llm_client import ModelClient
from conotate.models import Note

logger = logging.getLogger(__name__)

MAX_PROMPT_NOTES = 5

DESCRIPTION_PROMPT = """Based on these notes from the "{section_name}" section, generate a brief, natural description (1-2 sentences):

{notes_text}

Description:"""


def empty_description(section_name: str) -> str:
    return f"This is the {section_name} section. Add notes to generate a summary."


def template_description(texts: Sequence[str], section_name: str) -> str:
    """Deterministic description from the first words of the first two notes."""
    if not texts:
        return empty_description(section_name)
    keywords = ", ".join(" ".join(text.split()[:3]) for text in texts[:2])
    return (
        f"{section_name} currently focuses on {keywords}... showing a mix of recent "
        "thoughts and tasks. The content suggests a productive workflow involving these topics."
    )


def recent_notes(notes: Sequence[Note], limit: int = MAX_PROMPT_NOTES) -> list[Note]:
    """Newest notes first, at most ``limit``."""
    return sorted(notes, key=lambda n: n.created_at, reverse=True)[:limit]


async def describe_texts(
    texts: Sequence[str], section_name: str, client: ModelClient | None
) -> str:
    """Summarize note texts, most relevant first, in one or two sentences.

    Only the first five texts go into the prompt. Never fails: without a
    client, or when the model call fails, the templated description is used.
    """
    if not texts:
        return empty_description(section_name)

    texts = list(texts[:MAX_PROMPT_NOTES])
    if client is None:
        return template_description(texts, section_name)

    prompt = DESCRIPTION_PROMPT.format(section_name=section_name, notes_text="\n".join(texts))
    try:
        content = await client.chat(
            [{"role": "user", "content": prompt}],
            max_tokens=100,
            temperature=0.7,
        )
    except Exception:
        logger.warning(
            "Description generation failed for %s, using template", section_name, exc_info=True
        )
        return template_description(texts, section_name)

    return content.strip() or f"A collection of notes about {section_name}."


async def generate_description(
    notes: Sequence[Note], section_name: str, client: ModelClient | None
) -> str:
    """Describe a section from its five newest notes."""
    return await describe_texts([n.text for n in recent_notes(notes)], section_name, client)
