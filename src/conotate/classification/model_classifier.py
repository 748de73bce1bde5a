"""AI classifier: asks the model for a category and maps it onto a section id."""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from conotate.classification.commands import find_section_by_name
from conotate.llm_client import ModelClient, ModelError
from conotate.models import UNSORTED_ID, ClassificationResult, Section, SectionRef

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_THRESHOLD = 0.6

CLASSIFICATION_PROMPT = """You are a classification assistant for a personal organization app.
Classify the user's input into one of these categories:
- "task": Actionable items, todos, reminders, things to do
- "idea": Creative thoughts, possibilities, brainstorming, "what if" scenarios, imaginative concepts
- "note": Information to remember, facts, meeting notes, summaries
- "unsorted": When unclear, gibberish, ambiguous, or doesn't fit other categories

CRITICAL RULES:
1. If text is gibberish (not real words/phrases like "adhcfsbjhd", "zidwudd") → "unsorted" with confidence < 0.6
2. If text is ambiguous (single words like "banana" without context) → "unsorted" with confidence < 0.6
3. If text doesn't clearly fit any category → "unsorted" with confidence < 0.6
4. Creative/whimsical concepts (e.g., "cat powered laundry") → "idea" with high confidence
5. Action items (e.g., "get eggs") → "task" with high confidence
6. Information/facts (e.g., "Meeting at 3pm") → "note" with high confidence

Respond ONLY with valid JSON in this exact format:
{"category": "task|idea|note|unsorted", "confidence": 0.0-1.0}"""

CATEGORY_ALIASES: dict[str, str] = {
    "task": "tasks",
    "tasks": "tasks",
    "idea": "ideas",
    "ideas": "ideas",
    "note": "notes",
    "notes": "notes",
    "unsorted": "unsorted",
}


class ModelVerdict(BaseModel):
    """Schema of the JSON object the model is asked to return."""

    category: str
    confidence: float

    @field_validator("category")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("category is empty")
        return v.strip()

    @field_validator("confidence")
    @classmethod
    def _not_nan(cls, v: float) -> float:
        if math.isnan(v):
            raise ValueError("confidence is NaN")
        return v


def extract_json(text: str) -> str:
    """Cut the JSON object out of a response that may carry surrounding prose.

    Takes the span from the first ``{`` to the last ``}``; falls back to the
    first ``(`` and last ``)``; otherwise returns ``text`` unchanged.
    """
    for open_ch, close_ch in (("{", "}"), ("(", ")")):
        start = text.find(open_ch)
        end = text.rfind(close_ch)
        if start != -1 and end != -1 and start < end:
            return text[start : end + 1]
    return text


def parse_verdict(content: str) -> ModelVerdict:
    """Parse the model's completion text into a validated verdict."""
    try:
        data: Any = json.loads(extract_json(content))
    except json.JSONDecodeError as e:
        raise ModelError(f"Model response is not JSON: {content[:200]!r}") from e
    if not isinstance(data, dict):
        raise ModelError("Model response is not a JSON object")
    if isinstance(data.get("confidence"), bool):
        raise ModelError("confidence must be a number")
    try:
        return ModelVerdict.model_validate(data)
    except ValidationError as e:
        raise ModelError(f"Model response failed validation: {e.error_count()} error(s)") from e


def resolve_category(category: str, available_sections: Sequence[Section | SectionRef]) -> str:
    """Map a model category onto a section id, or raise ``ModelError``."""
    lowered = category.lower()
    if lowered in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[lowered]
    section = find_section_by_name(lowered, available_sections)
    if section is None:
        raise ModelError(f"Unknown category from model: {category!r}")
    return section.id


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, value))


async def classify_with_model(
    text: str,
    available_sections: Sequence[Section | SectionRef],
    client: ModelClient,
    threshold: float = LOW_CONFIDENCE_THRESHOLD,
) -> ClassificationResult:
    """Classify ``text`` with the model.

    Raises:
        ModelError: on transport failure, malformed output, or a category that
            resolves to no known section. Callers fall back to keywords.
    """
    content = await client.chat(
        [
            {"role": "system", "content": CLASSIFICATION_PROMPT},
            {"role": "user", "content": text},
        ],
        max_tokens=150,
        temperature=0.1,
    )
    verdict = parse_verdict(content)
    confidence = clamp_confidence(verdict.confidence)
    section_id = resolve_category(verdict.category, available_sections)

    if confidence < threshold:
        section_id = UNSORTED_ID

    logger.debug(
        "Model verdict %s (%.2f) -> %s", verdict.category, verdict.confidence, section_id
    )
    return ClassificationResult(section_id=section_id, confidence=confidence)
