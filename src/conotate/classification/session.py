"""Debounced classify-as-you-type for a single composition.

Each ``update`` bumps a generation counter and cancels the pending task. A
task applies its result only if the generation it captured is still the
current one, so a slow response for old text never overwrites a newer result.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Sequence

from conotate.classification.commands import parse_commands
from conotate.classification.orchestrator import FORCED_CONFIDENCE, NoteClassifier
from conotate.models import ClassificationResult, Section

logger = logging.getLogger(__name__)

MIN_CLASSIFY_LENGTH = 3

ResultCallback = Callable[[ClassificationResult | None], None]


class ClassificationSession:
    """Classification state of one composer."""

    def __init__(
        self,
        classifier: NoteClassifier,
        on_result: ResultCallback | None = None,
        debounce_seconds: float = 1.0,
    ) -> None:
        self.classifier = classifier
        self.on_result = on_result
        self.debounce_seconds = debounce_seconds
        self.generation = 0
        self.latest: ClassificationResult | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def update(self, text: str, sections: Sequence[Section]) -> None:
        """Register a text change. Must be called from a running event loop."""
        self.cancel()
        self.generation += 1
        generation = self.generation

        parsed = parse_commands(text, sections)
        if parsed.forced_category is not None:
            self._apply(
                generation,
                ClassificationResult(
                    section_id=parsed.forced_category, confidence=FORCED_CONFIDENCE
                ),
            )
            return

        if len(text.strip()) < MIN_CLASSIFY_LENGTH:
            self._apply(generation, None)
            return

        self._task = asyncio.create_task(self._run(generation, text, list(sections)))

    async def _run(self, generation: int, text: str, sections: list[Section]) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if generation != self.generation:
            return
        result = await self.classifier.classify(text, sections)
        self._apply(generation, result)

    def _apply(self, generation: int, result: ClassificationResult | None) -> None:
        if generation != self.generation:
            logger.debug("Dropping stale classification (generation %d)", generation)
            return
        self.latest = result
        if self.on_result is not None:
            self.on_result(result)

    def cancel(self) -> None:
        """Cancel the pending classification, if any."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the pending classification to finish (used by callers and tests)."""
        task = self._task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def aclose(self) -> None:
        task = self._task
        self.cancel()
        self.generation += 1
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
