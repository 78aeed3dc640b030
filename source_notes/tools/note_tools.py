"""Note block MCP tools.

This module provides MCP tool wrappers for note operations inside a source:
- Append a new note
- Replace a note's content
- Toggle a note's published flag
- Update a note's tags
- Delete a note

All tools delegate to core operations in source_notes.core.source_operations
and return ``{"success": bool, "message": str, ...}`` envelopes.
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import Context

from source_notes.config import SITE_CONFIGURATION
from source_notes.server import mcp, coordinator
from source_notes.models import (
    AppendNoteInput,
    ReplaceNoteContentInput,
    ToggleNotePublishedInput,
    UpdateNoteTagsInput,
    DeleteNoteInput,
)
from source_notes.core.request_handlers import run_request
from source_notes.core.source_operations import edit_source_note


def _edit(input: Any) -> dict[str, Any]:
    return run_request(
        SITE_CONFIGURATION,
        lambda: edit_source_note(SITE_CONFIGURATION, coordinator, input),
    )


# ==============================================================================
# CREATE
# ==============================================================================

@mcp.tool()
async def append_source_note(
    input: AppendNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Append a timestamped note to the end of a source.

    The note header is stamped with the current UTC time (minute precision).
    Timestamps can repeat, so use the returned ``noteIndex`` to address the
    note in later calls.

    Args:
        input (AppendNoteInput): Validated input containing:
            - slug (str): Source slug
            - content (str): Note text
            - tags (list[str], optional): Note tags
            - published (bool, optional): Visible on the site (default False)
            - link (str, optional): External deep link

    Returns:
        {"success": True, "message": "Note saved", "timestamp": str, "noteIndex": int, ...}

    Error Handling:
        - Invalid slug or empty content → status 400
        - Source not found → status 404
    """
    return _edit(input)


# ==============================================================================
# EDIT
# ==============================================================================

@mcp.tool()
async def replace_source_note_content(
    input: ReplaceNoteContentInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Replace a note's text while keeping its header and metadata lines.

    Args:
        input (ReplaceNoteContentInput): Validated input containing:
            - slug (str): Source slug
            - timestamp (str): Note timestamp
            - noteIndex (int, optional): Note position; always pass it when known
            - content (str): New note text

    Returns:
        {"success": True, "message": "Note updated", "timestamp": str, "noteIndex": int, ...}

    Error Handling:
        - Note not found → status 404
    """
    return _edit(input)


@mcp.tool()
async def toggle_source_note_published(
    input: ToggleNotePublishedInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Flip a note between published and private.

    Notes without a ``published`` line are left unchanged and the response
    carries ``published: None``.

    Returns:
        {"success": True, "message": "Note updated", "published": bool | None, ...}
    """
    return _edit(input)


@mcp.tool()
async def update_source_note_tags(
    input: UpdateNoteTagsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Replace a note's tags and recompute the source's aggregate tags.

    An empty list removes the note's tags line.

    Returns:
        {"success": True, "message": "Note updated", "tags": list[str], "sourceTags": list[str], ...}

    Error Handling:
        - tags not a list of strings → status 400
        - Note not found → status 404
    """
    return _edit(input)


@mcp.tool()
async def delete_source_note(
    input: DeleteNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Delete a note block (header through the next note header or end of source).

    Returns:
        {"success": True, "message": "Note deleted", ...}
    """
    return _edit(input)
