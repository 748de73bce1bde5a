"""Notebook service: capture, routing and section upkeep on top of the store."""

from __future__ import annotations

import asyncio
import logging

from conotate.classification.commands import parse_commands
from conotate.classification.descriptions import generate_description
from conotate.classification.orchestrator import NoteClassifier
from conotate.llm_client import ModelClient
from conotate.models import UNSORTED_ID, ClassificationResult, Note, Section, make_section_id
from conotate.stores.library import LibraryStore

logger = logging.getLogger(__name__)


class Notebook:
    """Routes captured text into sections and keeps section descriptions fresh.

    Description regeneration runs as a background task per section. A newer
    request for the same section cancels the older one, so the last write wins.
    """

    def __init__(
        self,
        store: LibraryStore,
        classifier: NoteClassifier,
        client: ModelClient | None = None,
    ) -> None:
        self.store = store
        self.classifier = classifier
        self.client = client
        self._description_tasks: dict[str, asyncio.Task[str | None]] = {}

    async def capture(self, text: str) -> tuple[Note, ClassificationResult, Section | None]:
        """Classify ``text``, store it, and schedule a description refresh.

        Returns the stored note, the classification that routed it, and the
        section created for an ``@mention`` of an unknown section (if any).

        Raises:
            ValueError: if nothing is left to store after removing commands.
        """
        sections = self.store.list_sections()
        parsed = parse_commands(text, sections)

        created: Section | None = None
        if parsed.forced_category is None and parsed.section_name is not None:
            created = self.create_section(parsed.section_name)
            sections = self.store.list_sections()
            parsed = parse_commands(text, sections)
            logger.info("Created section %s from mention", created.id)

        if not parsed.clean_text:
            raise ValueError("Note text is empty")

        result = await self.classifier.classify(text, sections)
        if self.store.get_section(result.section_id) is None:
            logger.info("Section %s no longer exists, routing to unsorted", result.section_id)
            result = ClassificationResult(section_id=UNSORTED_ID, confidence=result.confidence)
        note = self.add_note(parsed.clean_text, result.section_id)
        logger.info(
            "Captured note %s into %s (confidence %.2f)",
            note.id,
            result.section_id,
            result.confidence,
        )
        return note, result, created

    def add_note(self, text: str, section_id: str) -> Note:
        """Store a note and schedule its section's description refresh."""
        note = self.store.add_note(text, section_id)
        self.schedule_description(section_id)
        return note

    def create_section(
        self, name: str, tags: list[str] | None = None, content: str = ""
    ) -> Section:
        """Create a section; non-blank ``content`` becomes its first note."""
        section = Section(
            id=self._unused_section_id(name),
            name=name,
            tags=tags or [],
            description=f"A new section for {name}.",
        )
        self.store.add_section(section)
        if content.strip():
            self.add_note(content.strip(), section.id)
        return section

    def _unused_section_id(self, name: str) -> str:
        """``make_section_id`` with a numeric suffix while the id is taken."""
        base = make_section_id(name)
        section_id, n = base, 1
        while self.store.get_section(section_id) is not None:
            n += 1
            section_id = f"{base}-{n}"
        return section_id

    def schedule_description(self, section_id: str) -> None:
        """Start a background description refresh for ``section_id``."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop, skipping description refresh for %s", section_id)
            return
        previous = self._description_tasks.get(section_id)
        if previous is not None and not previous.done():
            previous.cancel()
        task = loop.create_task(self.refresh_description(section_id))
        self._description_tasks[section_id] = task
        task.add_done_callback(lambda t: self._forget(section_id, t))

    def _forget(self, section_id: str, task: asyncio.Task[str | None]) -> None:
        if self._description_tasks.get(section_id) is task:
            del self._description_tasks[section_id]
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Description refresh for %s failed", section_id, exc_info=task.exception()
            )

    async def refresh_description(self, section_id: str) -> str | None:
        """Regenerate and store a section's description. None if it no longer exists."""
        section = self.store.get_section(section_id)
        if section is None:
            return None
        notes = self.store.list_notes(section_id)
        description = await generate_description(notes, section.name, self.client)
        if not self.store.set_description(section_id, description):
            logger.info("Section %s was deleted before its description was saved", section_id)
            return None
        return description

    async def drain(self) -> None:
        """Wait for all scheduled description refreshes."""
        tasks = list(self._description_tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
