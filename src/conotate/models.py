"""Pydantic models for sections, notes, classification values and the API."""

import re
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CANONICAL_SECTION_IDS = ("tasks", "ideas", "notes", "unsorted")
UNSORTED_ID = "unsorted"


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict[str, Any]:
        """Serialize to the JSON record format (camelCase, absent optionals omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Section(CamelModel):
    """A user-defined bucket that notes are organized into."""

    id: str
    name: str
    emoji: str | None = None
    tags: list[str] | None = None
    description: str | None = None
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)
    is_bookmarked: bool = False


class Note(CamelModel):
    """A single freeform text entry belonging to exactly one section."""

    id: str
    text: str
    section_id: str
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)
    tags: list[str] | None = None


class ClassificationResult(CamelModel):
    """Section chosen for a piece of text, with a confidence in [0, 1]."""

    section_id: str
    confidence: float = Field(ge=0.0, le=1.0)


class ParsedCommand(CamelModel):
    """Explicit user intent extracted from raw text."""

    clean_text: str
    forced_category: str | None = None
    section_name: str | None = None


def make_section_id(name: str, now: float | None = None) -> str:
    """Build a stable id for a new section: ``<slug>-<unix seconds>``."""
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return f"{slug}-{int(now if now is not None else time.time())}"


# ── API request/response bodies ──


class SectionRef(BaseModel):
    """Minimal section reference sent by clients of the classify endpoint."""

    id: str
    name: str


class ClassifyRequest(CamelModel):
    """Request body for POST /api/v1/classify."""

    text: str = Field(min_length=1, max_length=10000)
    available_sections: list[SectionRef] = Field(default_factory=list)


class ClassifyResponse(CamelModel):
    """Response body for POST /api/v1/classify."""

    section_id: str
    confidence: float


class NoteText(BaseModel):
    text: str


class DescribeRequest(CamelModel):
    """Request body for POST /api/v1/describe."""

    notes: list[NoteText]
    section_name: str = Field(min_length=1)


class DescribeResponse(BaseModel):
    description: str


class CaptureRequest(BaseModel):
    """Request body for POST /api/v1/notes."""

    text: str = Field(min_length=1, max_length=10000)


class CaptureResponse(CamelModel):
    """Stored note plus the classification that routed it."""

    note: Note
    section_id: str
    confidence: float
    created_section: Section | None = None


class SectionCreateRequest(BaseModel):
    """Request body for POST /api/v1/sections."""

    name: str = Field(min_length=1, max_length=200)
    tags: list[str] = Field(default_factory=list)
    content: str = ""


class SectionUpdateRequest(BaseModel):
    """Partial section update; None means no change."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    tags: list[str] | None = None
    description: str | None = None


class NoteUpdateRequest(CamelModel):
    """Partial note update; None means no change."""

    text: str | None = Field(default=None, min_length=1, max_length=10000)
    section_id: str | None = None


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatCompletionRequest(BaseModel):
    """Chat-completions body accepted by the proxy endpoint."""

    model: str | None = None
    messages: list[ChatMessage] = Field(min_length=1)
    max_tokens: int = Field(default=150, ge=1, le=4096)
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
