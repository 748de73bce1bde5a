"""Section and note endpoints backed by the library store."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, HTTPException, Query
from fastapi.responses import PlainTextResponse

from conotate.api.dependencies import get_library_store, get_notebook
from conotate.models import (
    CaptureRequest,
    CaptureResponse,
    NoteUpdateRequest,
    SectionCreateRequest,
    SectionUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["library"])


# ── Sections ──


@router.get("/sections")
async def list_sections() -> list[dict[str, Any]]:
    return [s.to_record() for s in get_library_store().list_sections()]


@router.post("/sections", status_code=201)
async def create_section(request: SectionCreateRequest) -> dict[str, Any]:
    """Create a section; non-blank ``content`` is stored as its first note."""
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="Section name must be non-empty")
    section = get_notebook().create_section(name, request.tags, request.content)
    logger.info("Created section %s", section.id)
    return section.to_record()


@router.patch("/sections/{section_id}")
async def update_section(section_id: str, request: SectionUpdateRequest) -> dict[str, Any]:
    section = get_library_store().update_section(
        section_id, name=request.name, tags=request.tags, description=request.description
    )
    if section is None:
        raise HTTPException(status_code=404, detail=f"Section not found: {section_id}")
    return section.to_record()


@router.delete("/sections/{section_id}")
async def delete_section(
    section_id: str, export_first: Annotated[bool, Query()] = False
) -> dict[str, Any]:
    """Delete a section and its notes, optionally returning a text export first."""
    store = get_library_store()
    exported = store.export_section_text(section_id) if export_first else None
    if not store.delete_section(section_id):
        raise HTTPException(status_code=404, detail=f"Section not found: {section_id}")
    logger.info("Deleted section %s", section_id)
    response: dict[str, Any] = {"deleted": section_id}
    if exported is not None:
        response["export"] = exported
    return response


@router.post("/sections/{section_id}/bookmark")
async def toggle_bookmark(section_id: str) -> dict[str, Any]:
    section = get_library_store().toggle_bookmark(section_id)
    if section is None:
        raise HTTPException(status_code=404, detail=f"Section not found: {section_id}")
    return section.to_record()


@router.get("/sections/{section_id}/export", response_class=PlainTextResponse)
async def export_section(section_id: str) -> str:
    """Plain-text export of one section and its notes."""
    text = get_library_store().export_section_text(section_id)
    if text is None:
        raise HTTPException(status_code=404, detail=f"Section not found: {section_id}")
    return text


# ── Notes ──


@router.get("/notes")
async def list_notes(
    section_id: Annotated[str | None, Query(alias="sectionId")] = None,
) -> list[dict[str, Any]]:
    """Notes newest first, optionally for a single section."""
    return [n.to_record() for n in get_library_store().list_notes(section_id)]


@router.post("/notes", status_code=201, response_model=CaptureResponse)
async def capture_note(request: CaptureRequest) -> CaptureResponse:
    """Classify and store a note.

    Slash commands and ``@mentions`` are honored; mentioning an unknown
    section creates it.
    """
    try:
        note, result, created = await get_notebook().capture(request.text)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return CaptureResponse(
        note=note,
        section_id=result.section_id,
        confidence=result.confidence,
        created_section=created,
    )


@router.patch("/notes/{note_id}")
async def update_note(note_id: str, request: NoteUpdateRequest) -> dict[str, Any]:
    """Edit a note's text and/or move it to another section."""
    store = get_library_store()
    note = store.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Note not found: {note_id}")
    if request.text is not None:
        text = request.text.strip()
        if not text:
            raise HTTPException(status_code=422, detail="Note text is empty")
        note = store.update_note_text(note_id, text) or note
    if request.section_id is not None and request.section_id != note.section_id:
        try:
            note = store.move_note(note_id, request.section_id) or note
        except KeyError as e:
            raise HTTPException(
                status_code=404, detail=f"Section not found: {request.section_id}"
            ) from e
    return note.to_record()


@router.delete("/notes/{note_id}")
async def delete_note(note_id: str) -> dict[str, str]:
    if not get_library_store().delete_note(note_id):
        raise HTTPException(status_code=404, detail=f"Note not found: {note_id}")
    return {"deleted": note_id}


# ── Backup ──


@router.get("/export")
async def export_library() -> dict[str, list[dict[str, Any]]]:
    """Full JSON backup of sections and notes."""
    return get_library_store().export_data()


@router.post("/import")
async def import_library(data: Annotated[dict[str, Any], Body()]) -> dict[str, int]:
    """Replace the library with a JSON backup. Invalid records are skipped."""
    if not isinstance(data.get("sections"), list) or not isinstance(data.get("notes"), list):
        raise HTTPException(
            status_code=422, detail="Backup must contain 'sections' and 'notes' lists"
        )
    sections, notes = get_library_store().import_data(data)
    return {"sections": sections, "notes": notes}


@router.get("/export/rows")
async def export_rows(
    user_id: Annotated[str, Query(alias="userId", min_length=1)],
) -> dict[str, list[dict[str, Any]]]:
    """Sections and notes in the backend row shape, owned by ``userId``."""
    return get_library_store().export_rows(user_id)


@router.post("/import/rows")
async def import_rows(rows: Annotated[dict[str, Any], Body()]) -> dict[str, int]:
    """Replace the library with backend rows. Malformed rows are skipped."""
    if not isinstance(rows.get("sections"), list) or not isinstance(rows.get("notes"), list):
        raise HTTPException(
            status_code=422, detail="Rows must contain 'sections' and 'notes' lists"
        )
    sections, notes = get_library_store().import_rows(rows)
    return {"sections": sections, "notes": notes}
