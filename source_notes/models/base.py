"""Base Pydantic models for MCP tool input validation.

This module defines base models that provide common validation patterns
for source and note operations. Other input models inherit from these bases.

Base Models:
- BaseSourceInput: Slug validation for operations on one source document
- BaseNoteReferenceInput: Adds the timestamp/index pair that addresses one note
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from source_notes.core.collection_operations import validate_slug


class BaseSourceInput(BaseModel):
    """Base model for source operations with common validation.

    Provides standard validation for document slugs.
    All source-related input models should inherit from this class.
    """

    slug: str = Field(
        min_length=1,
        description=(
            "Source slug (file name without .md extension). "
            "Examples: 'thinking-fast-and-slow-daniel-kahneman'. "
            "Must not contain '..', '/' or '\\'."
        ),
        examples=["thinking-fast-and-slow-daniel-kahneman", "the-pragmatic-engineer-gergely-orosz"]
    )

    @field_validator('slug')
    @classmethod
    def check_slug(cls, v: str) -> str:
        """Validate the slug for safety and format.

        Enforces:
        - Non-empty slug
        - No path traversal (``..``) or separators (``/``, ``\\``)
        - Strips .md extension if present

        Raises:
            ValueError: If the slug is empty or unsafe
        """
        return validate_slug(v)

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class BaseNoteReferenceInput(BaseSourceInput):
    """Base model for operations on one existing note.

    A note is addressed by its header timestamp plus, preferably, its
    zero-based position among all notes in the source. Timestamps are not
    unique, so the index is authoritative whenever it is supplied.
    """

    timestamp: str = Field(
        min_length=1,
        description="Note timestamp as written in its header (YYYY-MM-DDTHH:MM).",
        examples=["2026-02-27T09:22"]
    )

    note_index: Optional[int] = Field(
        None,
        alias="noteIndex",
        description=(
            "Zero-based position of the note among all notes in the source. "
            "Omit only for legacy callers; the first note with the timestamp is used."
        )
    )

    @field_validator('timestamp')
    @classmethod
    def validate_timestamp(cls, v: str) -> str:
        """Strip whitespace and reject blank timestamps."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Timestamp is required")
        return cleaned
