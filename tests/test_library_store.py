"""Tests for the SQLite library store."""

import sqlite3
from pathlib import Path

import pytest

from conotate.models import Section
from conotate.stores.library import DEFAULT_SECTIONS, LibraryStore

# ---------------------------------------------------------------------------
# Connection and seeding
# ---------------------------------------------------------------------------


class TestLibraryStoreSetup:
    def test_wal_mode_enabled(self, tmp_path: Path) -> None:
        store = LibraryStore(tmp_path / "library.db")
        assert store.conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"

    def test_foreign_keys_enabled(self, tmp_path: Path) -> None:
        store = LibraryStore(tmp_path / "library.db")
        assert store.conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_seeds_canonical_sections(self, store: LibraryStore) -> None:
        sections = {s.id: s for s in store.list_sections()}
        assert set(sections) == {"notes", "ideas", "tasks", "unsorted"}
        assert sections["tasks"].name == "Tasks"
        assert sections["tasks"].tags == ["#todo", "#urgent", "#work"]
        assert sections["unsorted"].description.startswith("Notes that couldn't be")

    def test_no_seed_when_disabled(self, tmp_path: Path) -> None:
        store = LibraryStore(tmp_path / "library.db", seed_defaults=False)
        assert store.list_sections() == []

    def test_reopen_keeps_data(self, tmp_path: Path) -> None:
        store = LibraryStore(tmp_path / "library.db")
        store.delete_section("ideas")
        store.close()

        reopened = LibraryStore(tmp_path / "library.db")
        ids = {s.id for s in reopened.list_sections()}
        assert "ideas" not in ids
        assert "unsorted" in ids

    def test_unsorted_is_recreated(self, store: LibraryStore) -> None:
        assert store.delete_section("unsorted")
        assert store.get_section("unsorted") is not None


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class TestSections:
    def test_add_and_get(self, store: LibraryStore) -> None:
        store.add_section(Section(id="recipes-1712000000", name="Recipes", emoji="🍝"))
        section = store.get_section("recipes-1712000000")
        assert section is not None
        assert section.name == "Recipes"
        assert section.emoji == "🍝"
        assert section.tags is None

    def test_duplicate_id_rejected(self, store: LibraryStore) -> None:
        with pytest.raises(sqlite3.IntegrityError):
            store.add_section(Section(id="tasks", name="More Tasks"))

    def test_partial_update(self, store: LibraryStore) -> None:
        before = store.get_section("ideas")
        updated = store.update_section("ideas", name="Sparks")
        assert updated.name == "Sparks"
        assert updated.tags == before.tags
        assert updated.description == before.description
        assert store.get_section("ideas").name == "Sparks"

    def test_update_missing(self, store: LibraryStore) -> None:
        assert store.update_section("nope", name="x") is None

    def test_toggle_bookmark(self, store: LibraryStore) -> None:
        assert store.toggle_bookmark("notes").is_bookmarked is True
        assert store.toggle_bookmark("notes").is_bookmarked is False
        assert store.toggle_bookmark("nope") is None

    def test_set_description(self, store: LibraryStore) -> None:
        assert store.set_description("tasks", "Errands and chores.")
        assert store.get_section("tasks").description == "Errands and chores."
        assert not store.set_description("nope", "x")

    def test_delete_cascades_to_notes(self, store: LibraryStore) -> None:
        note = store.add_note("robot butler", "ideas")
        store.add_note("buy milk", "tasks")

        assert store.delete_section("ideas")

        assert store.get_note(note.id) is None
        assert [n.text for n in store.list_notes()] == ["buy milk"]

    def test_delete_missing(self, store: LibraryStore) -> None:
        assert not store.delete_section("nope")


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


class TestNotes:
    def test_add_note(self, store: LibraryStore) -> None:
        note = store.add_note("buy milk", "tasks")
        assert note.section_id == "tasks"
        assert store.get_note(note.id) == note

    def test_add_note_requires_section(self, store: LibraryStore) -> None:
        with pytest.raises(KeyError):
            store.add_note("orphan", "missing-section")

    def test_list_newest_first_and_filtered(self, store: LibraryStore) -> None:
        store.add_note("first", "notes")
        store.add_note("second", "notes")
        store.add_note("elsewhere", "tasks")

        assert [n.text for n in store.list_notes("notes")] == ["second", "first"]
        assert len(store.list_notes()) == 3

    def test_update_text(self, store: LibraryStore) -> None:
        note = store.add_note("by milk", "tasks")
        updated = store.update_note_text(note.id, "buy milk")
        assert updated.text == "buy milk"
        assert updated.updated_at >= note.updated_at

    def test_move_note(self, store: LibraryStore) -> None:
        note = store.add_note("robot butler", "unsorted")
        assert store.move_note(note.id, "ideas").section_id == "ideas"
        with pytest.raises(KeyError):
            store.move_note(note.id, "missing-section")

    def test_delete_note(self, store: LibraryStore) -> None:
        note = store.add_note("buy milk", "tasks")
        assert store.delete_note(note.id)
        assert not store.delete_note(note.id)


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------


class TestExportImport:
    def test_export_uses_camel_case_and_omits_absent_fields(self, store: LibraryStore) -> None:
        store.add_note("buy milk", "tasks")
        data = store.export_data()

        note = data["notes"][0]
        assert note["sectionId"] == "tasks"
        assert "createdAt" in note
        assert "tags" not in note

        section = next(s for s in data["sections"] if s["id"] == "tasks")
        assert section["isBookmarked"] is False
        assert "emoji" not in section

    def test_import_replaces_library(self, store: LibraryStore, tmp_path: Path) -> None:
        store.add_note("buy milk", "tasks")
        backup = store.export_data()

        other = LibraryStore(tmp_path / "other.db")
        other.add_note("will be replaced", "notes")
        assert other.import_data(backup) == (len(DEFAULT_SECTIONS), 1)

        assert [n.text for n in other.list_notes()] == ["buy milk"]
        assert {s.id for s in other.list_sections()} == {s["id"] for s in DEFAULT_SECTIONS}

    def test_import_skips_invalid_records(self, store: LibraryStore) -> None:
        data = {
            "sections": [
                {"id": "work-1", "name": "Work", "createdAt": 1.0, "updatedAt": 1.0},
                {"name": "No id"},
            ],
            "notes": [
                {"id": "n1", "text": "ship it", "sectionId": "work-1", "createdAt": 2.0,
                 "updatedAt": 2.0},
                {"id": "n2", "sectionId": "work-1"},
                {"id": "n3", "text": "orphan", "sectionId": "gone"},
            ],
        }
        assert store.import_data(data) == (1, 1)
        assert store.get_note("n1").text == "ship it"
        assert store.get_section("unsorted") is not None

    def test_export_section_text(self, store: LibraryStore) -> None:
        store.add_note("buy milk", "tasks")
        text = store.export_section_text("tasks")

        lines = text.split("\n")
        assert lines[0] == "SECTION: Tasks"
        assert lines[1].startswith("Actionable items")
        assert lines[2:4] == ["", "NOTES:"]
        assert lines[4].startswith("- buy milk (")

    def test_export_section_text_missing(self, store: LibraryStore) -> None:
        assert store.export_section_text("nope") is None


class TestBackendRows:
    def test_export_rows_shape(self, store: LibraryStore) -> None:
        store.add_note("buy milk", "tasks")
        rows = store.export_rows("user-1")

        section = next(r for r in rows["sections"] if r["id"] == "tasks")
        assert section["user_id"] == "user-1"
        assert section["is_bookmarked"] is False
        assert section["created_at"].endswith("+00:00")
        assert rows["notes"][0]["section_id"] == "tasks"

    def test_import_rows_skips_malformed(self, store: LibraryStore) -> None:
        rows = {
            "sections": [
                {"id": "work-1", "user_id": "u", "name": "Work",
                 "created_at": "2024-04-01T12:00:00Z", "updated_at": "2024-04-01T12:00:00Z"},
                {"id": "broken", "name": "No timestamps"},
            ],
            "notes": [
                {"id": "n1", "user_id": "u", "section_id": "work-1", "text": "ship it",
                 "created_at": "2024-04-01T12:00:00Z", "updated_at": "2024-04-01T12:00:00Z"},
                {"id": "n2", "section_id": "work-1", "text": "bad time",
                 "created_at": 5, "updated_at": 5},
            ],
        }

        assert store.import_rows(rows) == (1, 1)
        assert store.get_note("n1").created_at == 1711972800.0
        assert store.get_section("broken") is None
        assert store.get_section("unsorted") is not None
