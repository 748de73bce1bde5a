"""Classification orchestrator: commands, then model, then keyword fallback."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from conotate.classification.commands import parse_commands
from conotate.classification.keywords import classify_by_keyword
from conotate.classification.model_classifier import (
    LOW_CONFIDENCE_THRESHOLD,
    classify_with_model,
)
from conotate.llm_client import ModelClient
from conotate.models import UNSORTED_ID, ClassificationResult, Section, SectionRef

logger = logging.getLogger(__name__)

FORCED_CONFIDENCE = 1.0
KEYWORD_MATCH_CONFIDENCE = 0.5
KEYWORD_MISS_CONFIDENCE = 0.4


def keyword_result(text: str) -> ClassificationResult:
    """Keyword classification with its fixed fallback confidence."""
    section_id = classify_by_keyword(text)
    confidence = KEYWORD_MISS_CONFIDENCE if section_id == UNSORTED_ID else KEYWORD_MATCH_CONFIDENCE
    return ClassificationResult(section_id=section_id, confidence=confidence)


async def classify_note(
    text: str,
    available_sections: Sequence[Section | SectionRef],
    client: ModelClient | None,
    threshold: float = LOW_CONFIDENCE_THRESHOLD,
) -> ClassificationResult:
    """Pick a section for ``text``. Never fails on model errors.

    An explicit command wins with confidence 1.0. Otherwise the model is
    asked; any failure (including no client at all) falls back to keywords.
    """
    parsed = parse_commands(text, available_sections)
    if parsed.forced_category is not None:
        return ClassificationResult(
            section_id=parsed.forced_category, confidence=FORCED_CONFIDENCE
        )

    if client is None:
        logger.info("No model client, using keyword classification")
        return keyword_result(parsed.clean_text)

    try:
        return await classify_with_model(
            parsed.clean_text, available_sections, client, threshold=threshold
        )
    except Exception:
        logger.warning("Model classification failed, using keyword fallback", exc_info=True)
        return keyword_result(parsed.clean_text)


class NoteClassifier:
    """Orchestrator with its model client injected."""

    def __init__(
        self,
        client: ModelClient | None = None,
        threshold: float = LOW_CONFIDENCE_THRESHOLD,
    ) -> None:
        self.client = client
        self.threshold = threshold

    async def classify(
        self, text: str, available_sections: Sequence[Section | SectionRef]
    ) -> ClassificationResult:
        return await classify_note(text, available_sections, self.client, self.threshold)
