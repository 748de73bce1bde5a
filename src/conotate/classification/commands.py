"""Command parser: explicit user intent embedded in raw note text.

Recognized forms:

- ``/task``, ``/idea``, ``/note`` (and their plurals), case-insensitive, at the
  start of the text and followed by whitespace or the end of the text.
  ``/taskrabbit`` is ordinary text.
- ``@Section content``: routes ``content`` to the section whose name matches
  ``Section`` case-insensitively.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from conotate.models import ParsedCommand, Section, SectionRef

SLASH_COMMANDS: dict[str, str] = {
    "task": "tasks",
    "idea": "ideas",
    "note": "notes",
}

_SLASH_RE = re.compile(r"^/(task|idea|note)s?(?=\s|$)\s*", re.IGNORECASE)
_MENTION_RE = re.compile(r"@(\w+)\s+(.+)", re.DOTALL)


def find_section_by_name(
    name: str, sections: Sequence[Section | SectionRef]
) -> Section | SectionRef | None:
    """Return the first section whose name equals ``name`` ignoring case."""
    wanted = name.lower()
    for section in sections:
        if section.name.lower() == wanted:
            return section
    return None


def parse_commands(text: str, available_sections: Sequence[Section | SectionRef]) -> ParsedCommand:
    """Extract clean text and a forced destination section from ``text``.

    An ``@mention`` of a section that does not exist yields no forced
    category but carries the mentioned name in ``section_name`` so the caller
    can create the section. This function never mutates anything.
    """
    trimmed = text.strip()

    slash = _SLASH_RE.match(trimmed)
    if slash:
        forced = SLASH_COMMANDS[slash.group(1).lower()]
        return ParsedCommand(clean_text=trimmed[slash.end() :].strip(), forced_category=forced)

    mention = _MENTION_RE.search(trimmed)
    if mention:
        name, content = mention.group(1), mention.group(2).strip()
        if content:
            section = find_section_by_name(name, available_sections)
            if section is not None:
                return ParsedCommand(
                    clean_text=content,
                    forced_category=section.id,
                    section_name=section.name,
                )
            return ParsedCommand(clean_text=trimmed, section_name=name)

    return ParsedCommand(clean_text=trimmed)
