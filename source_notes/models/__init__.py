"""Pydantic input models for MCP tool validation.

Architecture:
- base: Base models (BaseSourceInput, BaseNoteReferenceInput) for common validation
- note_models: Tagged note operation models and their discriminated union
- source_models: Input models for whole-source operations

Usage:
    from source_notes.models import AppendNoteInput, UpdateNoteTagsInput
    from source_notes.models import NOTE_OPERATION_ADAPTER
"""

from .base import BaseSourceInput, BaseNoteReferenceInput
from .note_models import (
    AppendNoteInput,
    ReplaceNoteContentInput,
    ToggleNotePublishedInput,
    UpdateNoteTagsInput,
    DeleteNoteInput,
    NoteOperationInput,
    NOTE_OPERATION_ADAPTER,
)
from .source_models import (
    ListSourceNotesInput,
    UpdateSourceMetadataInput,
    SetSourceArchivedInput,
    CreateSourceInput,
    CaptureBookmarkInput,
    UpdatePostMetadataInput,
)

__all__ = [
    # Base models
    "BaseSourceInput",
    "BaseNoteReferenceInput",
    # Note operation models
    "AppendNoteInput",
    "ReplaceNoteContentInput",
    "ToggleNotePublishedInput",
    "UpdateNoteTagsInput",
    "DeleteNoteInput",
    "NoteOperationInput",
    "NOTE_OPERATION_ADAPTER",
    # Source models
    "ListSourceNotesInput",
    "UpdateSourceMetadataInput",
    "SetSourceArchivedInput",
    "CreateSourceInput",
    "CaptureBookmarkInput",
    "UpdatePostMetadataInput",
]
