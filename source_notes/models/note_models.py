"""Pydantic input models for note block operations.

Each operation is its own model carrying an ``operation`` tag, and
:data:`NoteOperationInput` is the discriminated union over all of them. The
caller names the operation explicitly; nothing is inferred from which payload
keys happen to be present.

- append: Add a new note at the end of a source
- replace-content: Rewrite a note's free text, keeping its metadata
- toggle-published: Flip a note's published flag
- update-tags: Replace a note's tags and refresh the source's aggregate tags
- delete: Remove a note block
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union
from pydantic import Field, TypeAdapter, field_validator

from .base import BaseNoteReferenceInput, BaseSourceInput


class AppendNoteInput(BaseSourceInput):
    """Input model for append_source_note tool.

    Examples:
        >>> AppendNoteInput(slug="deep-work-cal-newport", content="Attention residue is real.")
        >>> AppendNoteInput(slug="deep-work-cal-newport", content="...", tags=["focus"], published=True)
    """

    operation: Literal["append"] = "append"

    content: str = Field(
        min_length=1,
        description="Markdown content of the new note. Must not be empty."
    )

    tags: list[str] = Field(
        default_factory=list,
        description="Tags for the new note. The source's aggregate tags are recomputed."
    )

    published: bool = Field(
        False,
        description="Whether the note is visible on the published site."
    )

    link: Optional[str] = Field(
        None,
        description="Optional external deep link (e.g. a timestamped episode URL)."
    )

    @field_validator('content')
    @classmethod
    def validate_content_not_empty(cls, v: str) -> str:
        """Validate that content is not empty or just whitespace."""
        if not v.strip():
            raise ValueError("Note content is required")
        return v

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True
        json_schema_extra = {
            "examples": [
                {
                    "slug": "deep-work-cal-newport",
                    "operation": "append",
                    "content": "Attention residue makes context switches expensive.",
                    "tags": ["focus"],
                    "published": False
                }
            ]
        }


class ReplaceNoteContentInput(BaseNoteReferenceInput):
    """Input model for replace_source_note_content tool.

    Keeps the note's header and metadata lines and replaces its free text.
    """

    operation: Literal["replace-content"] = "replace-content"

    content: str = Field(
        description="New note text. Surrounding whitespace is trimmed."
    )


class ToggleNotePublishedInput(BaseNoteReferenceInput):
    """Input model for toggle_source_note_published tool."""

    operation: Literal["toggle-published"] = "toggle-published"


class UpdateNoteTagsInput(BaseNoteReferenceInput):
    """Input model for update_source_note_tags tool.

    An empty list removes the note's tags line.
    """

    operation: Literal["update-tags"] = "update-tags"

    tags: list[str] = Field(
        description="Complete tag list for the note (order kept, duplicates dropped).",
        examples=[["agentic-coding", "productivity"], []]
    )

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True
        json_schema_extra = {
            "examples": [
                {
                    "slug": "mitchell-hashimotos-new-way-of-writing-code-the-pragmatic-engineer",
                    "operation": "update-tags",
                    "timestamp": "2026-02-27T09:22",
                    "noteIndex": 1,
                    "tags": ["agentic-coding"]
                }
            ]
        }


class DeleteNoteInput(BaseNoteReferenceInput):
    """Input model for delete_source_note tool."""

    operation: Literal["delete"] = "delete"


NoteOperationInput = Annotated[
    Union[
        AppendNoteInput,
        ReplaceNoteContentInput,
        ToggleNotePublishedInput,
        UpdateNoteTagsInput,
        DeleteNoteInput,
    ],
    Field(discriminator="operation"),
]
"""
The tagged union of all note operations, discriminated on ``operation``.
"""

NOTE_OPERATION_ADAPTER: TypeAdapter[NoteOperationInput] = TypeAdapter(NoteOperationInput)
