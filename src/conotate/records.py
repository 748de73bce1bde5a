"""Mapping between sections/notes and backend database rows.

Rows use snake_case columns, carry the owning ``user_id`` and store
timestamps as ISO-8601 strings. Optional fields that are absent are left out
of the row entirely.
"""

from datetime import UTC, datetime
from typing import Any

from conotate.models import Note, Section


def to_iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, UTC).isoformat()


def from_iso(value: str) -> float:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.timestamp()


def section_to_row(section: Section, user_id: str) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": section.id,
        "user_id": user_id,
        "name": section.name,
        "is_bookmarked": section.is_bookmarked,
        "created_at": to_iso(section.created_at),
        "updated_at": to_iso(section.updated_at),
    }
    if section.emoji is not None:
        row["emoji"] = section.emoji
    if section.tags is not None:
        row["tags"] = list(section.tags)
    if section.description is not None:
        row["description"] = section.description
    return row


def row_to_section(row: dict[str, Any]) -> Section:
    """Build a section from a backend row.

    Raises:
        KeyError: if a required column is missing.
    """
    return Section(
        id=row["id"],
        name=row["name"],
        emoji=row.get("emoji"),
        tags=row.get("tags"),
        description=row.get("description"),
        is_bookmarked=bool(row.get("is_bookmarked", False)),
        created_at=from_iso(row["created_at"]),
        updated_at=from_iso(row["updated_at"]),
    )


def note_to_row(note: Note, user_id: str) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": note.id,
        "user_id": user_id,
        "section_id": note.section_id,
        "text": note.text,
        "created_at": to_iso(note.created_at),
        "updated_at": to_iso(note.updated_at),
    }
    if note.tags is not None:
        row["tags"] = list(note.tags)
    return row


def row_to_note(row: dict[str, Any]) -> Note:
    return Note(
        id=row["id"],
        section_id=row["section_id"],
        text=row["text"],
        tags=row.get("tags"),
        created_at=from_iso(row["created_at"]),
        updated_at=from_iso(row["updated_at"]),
    )
