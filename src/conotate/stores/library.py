"""SQLite storage for sections and their notes."""

import json
import logging
import sqlite3
import time
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from conotate.models import UNSORTED_ID, Note, Section
from conotate.records import note_to_row, row_to_note, row_to_section, section_to_row

logger = logging.getLogger(__name__)

DEFAULT_SECTIONS: tuple[dict[str, Any], ...] = (
    {
        "id": "notes",
        "name": "Notes",
        "tags": ["#general", "#daily", "#log"],
        "description": (
            "A collection of general thoughts, reminders, and daily logs. This section "
            "serves as a catch-all for information that needs to be recorded quickly."
        ),
    },
    {
        "id": "ideas",
        "name": "Ideas",
        "tags": ["#brainstorm", "#innovation", "#future"],
        "description": (
            "Sparks of creativity and potential projects. This section contains raw "
            'concepts, "what if" scenarios, and early-stage planning for future endeavors.'
        ),
    },
    {
        "id": "tasks",
        "name": "Tasks",
        "tags": ["#todo", "#urgent", "#work"],
        "description": (
            "Actionable items and to-do lists. This section tracks pending "
            "responsibilities, deadlines, and operational tasks requiring attention."
        ),
    },
    {
        "id": "unsorted",
        "name": "Unsorted",
        "tags": ["#uncategorized"],
        "description": (
            "Notes that couldn't be automatically classified with high confidence. "
            "Review and organize these manually."
        ),
    },
)


class LibraryStore:
    """SQLite-backed sections and notes.

    Notes reference sections through a foreign key with ``ON DELETE CASCADE``,
    so deleting a section removes its notes.
    """

    def __init__(self, db_path: Path, seed_defaults: bool = True) -> None:
        """Initialize the library store.

        Args:
            db_path: Path to the SQLite database file.
            seed_defaults: Create the canonical sections on first connection.
        """
        self.db_path = db_path
        self.seed_defaults = seed_defaults
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA busy_timeout=5000")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._init_schema()
            if self.seed_defaults:
                self._seed_sections()
        return self._conn

    def _init_schema(self) -> None:
        """Initialize the database schema."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS sections (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                emoji TEXT,
                tags TEXT,
                description TEXT,
                is_bookmarked INTEGER NOT NULL DEFAULT 0,
                created_at REAL NOT NULL,
                updated_at REAL NOT NULL
            );

            CREATE TABLE IF NOT EXISTS notes (
                id TEXT PRIMARY KEY,
                section_id TEXT NOT NULL REFERENCES sections(id) ON DELETE CASCADE,
                text TEXT NOT NULL,
                tags TEXT,
                created_at REAL NOT NULL,
                updated_at REAL NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_notes_section ON notes(section_id, created_at);
        """)
        self.conn.commit()

    def _seed_sections(self) -> None:
        """Create missing canonical sections; ``unsorted`` must always exist."""
        existing = self.conn.execute("SELECT COUNT(*) FROM sections").fetchone()[0]
        templates = DEFAULT_SECTIONS if existing == 0 else [
            s for s in DEFAULT_SECTIONS if s["id"] == UNSORTED_ID
        ]
        now = time.time()
        for template in templates:
            self.conn.execute(
                """
                INSERT OR IGNORE INTO sections
                    (id, name, tags, description, is_bookmarked, created_at, updated_at)
                VALUES (?, ?, ?, ?, 0, ?, ?)
                """,
                (
                    template["id"],
                    template["name"],
                    json.dumps(template["tags"]),
                    template["description"],
                    now,
                    now,
                ),
            )
        self.conn.commit()

    # ── Sections ──

    def list_sections(self) -> list[Section]:
        cursor = self.conn.execute("SELECT * FROM sections ORDER BY created_at, rowid")
        return [_row_to_section(row) for row in cursor.fetchall()]

    def get_section(self, section_id: str) -> Section | None:
        row = self.conn.execute("SELECT * FROM sections WHERE id = ?", (section_id,)).fetchone()
        return _row_to_section(row) if row else None

    def add_section(self, section: Section) -> Section:
        """Insert a section. Raises ``sqlite3.IntegrityError`` if the id exists."""
        self.conn.execute(
            """
            INSERT INTO sections
                (id, name, emoji, tags, description, is_bookmarked, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            _section_params(section),
        )
        self.conn.commit()
        return section

    def update_section(
        self,
        section_id: str,
        name: str | None = None,
        tags: list[str] | None = None,
        description: str | None = None,
    ) -> Section | None:
        """Apply a partial update. Returns the updated section, or None if missing."""
        section = self.get_section(section_id)
        if section is None:
            return None
        if name is not None:
            section.name = name
        if tags is not None:
            section.tags = tags
        if description is not None:
            section.description = description
        section.updated_at = time.time()
        self.conn.execute(
            "UPDATE sections SET name = ?, tags = ?, description = ?, updated_at = ? WHERE id = ?",
            (section.name, _dump_tags(section.tags), section.description, section.updated_at,
             section_id),
        )
        self.conn.commit()
        return section

    def set_description(self, section_id: str, description: str) -> bool:
        """Overwrite a section's description. Last write wins."""
        cursor = self.conn.execute(
            "UPDATE sections SET description = ?, updated_at = ? WHERE id = ?",
            (description, time.time(), section_id),
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def toggle_bookmark(self, section_id: str) -> Section | None:
        self.conn.execute(
            "UPDATE sections SET is_bookmarked = 1 - is_bookmarked WHERE id = ?", (section_id,)
        )
        self.conn.commit()
        return self.get_section(section_id)

    def delete_section(self, section_id: str) -> bool:
        """Delete a section and, by cascade, all of its notes."""
        cursor = self.conn.execute("DELETE FROM sections WHERE id = ?", (section_id,))
        self.conn.commit()
        deleted = cursor.rowcount > 0
        if deleted and section_id == UNSORTED_ID and self.seed_defaults:
            self._seed_sections()
        return deleted

    # ── Notes ──

    def list_notes(self, section_id: str | None = None) -> list[Note]:
        """Notes newest first, optionally limited to one section."""
        if section_id is None:
            cursor = self.conn.execute("SELECT * FROM notes ORDER BY created_at DESC, rowid DESC")
        else:
            cursor = self.conn.execute(
                "SELECT * FROM notes WHERE section_id = ? ORDER BY created_at DESC, rowid DESC",
                (section_id,),
            )
        return [_row_to_note(row) for row in cursor.fetchall()]

    def get_note(self, note_id: str) -> Note | None:
        row = self.conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,)).fetchone()
        return _row_to_note(row) if row else None

    def add_note(self, text: str, section_id: str, tags: list[str] | None = None) -> Note:
        """Create a note in an existing section.

        Raises:
            KeyError: if ``section_id`` does not reference a section.
        """
        if self.get_section(section_id) is None:
            raise KeyError(section_id)
        note = Note(id=str(uuid.uuid4()).upper(), text=text, section_id=section_id, tags=tags)
        self._insert_note(note)
        self.conn.commit()
        return note

    def _insert_note(self, note: Note) -> None:
        self.conn.execute(
            """
            INSERT INTO notes (id, section_id, text, tags, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (note.id, note.section_id, note.text, _dump_tags(note.tags), note.created_at,
             note.updated_at),
        )

    def update_note_text(self, note_id: str, text: str) -> Note | None:
        self.conn.execute(
            "UPDATE notes SET text = ?, updated_at = ? WHERE id = ?",
            (text, time.time(), note_id),
        )
        self.conn.commit()
        return self.get_note(note_id)

    def move_note(self, note_id: str, section_id: str) -> Note | None:
        """Reassign a note to another section. Raises ``KeyError`` for unknown sections."""
        if self.get_section(section_id) is None:
            raise KeyError(section_id)
        self.conn.execute(
            "UPDATE notes SET section_id = ?, updated_at = ? WHERE id = ?",
            (section_id, time.time(), note_id),
        )
        self.conn.commit()
        return self.get_note(note_id)

    def delete_note(self, note_id: str) -> bool:
        cursor = self.conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    # ── Export / import ──

    def export_data(self) -> dict[str, list[dict[str, Any]]]:
        """Full backup in the JSON record format."""
        return {
            "sections": [s.to_record() for s in self.list_sections()],
            "notes": [n.to_record() for n in self.list_notes()],
        }

    def import_data(self, data: dict[str, Any]) -> tuple[int, int]:
        """Replace all sections and notes with the records in ``data``.

        Records missing a required field are skipped, as are notes whose
        section is not part of the import. Returns (sections, notes) imported.
        """
        sections = _parse_records(data.get("sections", []), Section)
        notes = _parse_records(data.get("notes", []), Note)
        return self._replace_all(sections, notes)

    def export_rows(self, user_id: str) -> dict[str, list[dict[str, Any]]]:
        """All sections and notes as backend rows owned by ``user_id``."""
        return {
            "sections": [section_to_row(s, user_id) for s in self.list_sections()],
            "notes": [note_to_row(n, user_id) for n in self.list_notes()],
        }

    def import_rows(self, rows: dict[str, Any]) -> tuple[int, int]:
        """Replace the library with backend rows. Malformed rows are skipped."""
        sections = _parse_rows(rows.get("sections", []), row_to_section)
        notes = _parse_rows(rows.get("notes", []), row_to_note)
        return self._replace_all(sections, notes)

    def _replace_all(self, sections: list[Section], notes: list[Note]) -> tuple[int, int]:
        section_ids = {s.id for s in sections}
        notes = [n for n in notes if n.section_id in section_ids]

        with self.conn:
            self.conn.execute("DELETE FROM notes")
            self.conn.execute("DELETE FROM sections")
            for section in sections:
                self.conn.execute(
                    """
                    INSERT OR REPLACE INTO sections
                        (id, name, emoji, tags, description, is_bookmarked, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    _section_params(section),
                )
            for note in notes:
                self.conn.execute(
                    """
                    INSERT OR REPLACE INTO notes
                        (id, section_id, text, tags, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (note.id, note.section_id, note.text, _dump_tags(note.tags), note.created_at,
                     note.updated_at),
                )
        if self.seed_defaults:
            self._seed_sections()
        logger.info("Imported %d sections and %d notes", len(sections), len(notes))
        return len(sections), len(notes)

    def export_section_text(self, section_id: str) -> str | None:
        """Plain-text export of one section, or None if it does not exist."""
        section = self.get_section(section_id)
        if section is None:
            return None
        lines = [f"SECTION: {section.name}"]
        if section.description:
            lines.append(section.description)
        lines.append("")
        lines.append("NOTES:")
        for note in self.list_notes(section_id):
            stamp = datetime.fromtimestamp(note.updated_at).strftime("%b %d, %Y at %H:%M")
            lines.append(f"- {note.text} ({stamp})")
        return "\n".join(lines)

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None


def _dump_tags(tags: list[str] | None) -> str | None:
    return json.dumps(tags) if tags is not None else None


def _load_tags(raw: str | None) -> list[str] | None:
    return json.loads(raw) if raw is not None else None


def _section_params(section: Section) -> tuple[Any, ...]:
    return (
        section.id,
        section.name,
        section.emoji,
        _dump_tags(section.tags),
        section.description,
        int(section.is_bookmarked),
        section.created_at,
        section.updated_at,
    )


def _row_to_section(row: sqlite3.Row) -> Section:
    return Section(
        id=row["id"],
        name=row["name"],
        emoji=row["emoji"],
        tags=_load_tags(row["tags"]),
        description=row["description"],
        is_bookmarked=bool(row["is_bookmarked"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_note(row: sqlite3.Row) -> Note:
    return Note(
        id=row["id"],
        section_id=row["section_id"],
        text=row["text"],
        tags=_load_tags(row["tags"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _parse_records(records: Iterable[Any], model: type[Any]) -> list[Any]:
    parsed = []
    for record in records:
        try:
            parsed.append(model.model_validate(record))
        except ValidationError:
            logger.warning("Skipping invalid %s record during import", model.__name__)
    return parsed


def _parse_rows(rows: Iterable[Any], convert: Callable[[dict[str, Any]], Any]) -> list[Any]:
    parsed = []
    for row in rows:
        try:
            parsed.append(convert(row))
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed backend row during import")
    return parsed
