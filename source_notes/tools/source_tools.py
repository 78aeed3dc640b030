"""Source document MCP tools.

This module provides MCP tool wrappers for whole-source operations:
- List a source's notes (with their addressing index)
- Save source metadata
- Archive or restore a source
- Create a new source
- Capture a podcast bookmark

All tools delegate to core operations in source_notes.core.source_operations.
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import Context

from source_notes.config import SITE_CONFIGURATION
from source_notes.server import mcp, coordinator
from source_notes.models import (
    ListSourceNotesInput,
    UpdateSourceMetadataInput,
    SetSourceArchivedInput,
    CreateSourceInput,
    CaptureBookmarkInput,
)
from source_notes.core.request_handlers import run_request
from source_notes.core.source_operations import (
    list_source_notes as list_notes,
    update_source_metadata as update_metadata,
    set_source_archived as set_archived,
    create_source as create,
    capture_bookmark as bookmark,
)


# ==============================================================================
# READ
# ==============================================================================

# Clients should address notes by the returned ``noteIndex``; timestamps repeat.
@mcp.tool()
async def list_source_notes(
    input: ListSourceNotesInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List every note in a source, in document order.

    Returns:
        {
            "success": True,
            "source": str,
            "title": str,
            "sourceTags": list[str],
            "notes": [{"timestamp", "noteIndex", "tags", "published", "content", ...}]
        }
    """
    return run_request(SITE_CONFIGURATION, lambda: list_notes(SITE_CONFIGURATION, input.slug))


# ==============================================================================
# WRITE
# ==============================================================================

@mcp.tool()
async def update_source_metadata(
    input: UpdateSourceMetadataInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Save source frontmatter fields (title, author, type, link, date, tags).

    Only supplied fields change. Titles with colons or quotes are quoted
    safely in the YAML.

    Returns:
        {"success": True, "message": "Source saved", "fields_updated": list[str], ...}
    """
    return run_request(
        SITE_CONFIGURATION,
        lambda: update_metadata(SITE_CONFIGURATION, coordinator, input.slug, input.updates()),
    )


@mcp.tool()
async def set_source_archived(
    input: SetSourceArchivedInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Archive (hide) or restore a source.

    Returns:
        {"success": True, "message": "Source saved", "archived": bool, ...}
    """
    return run_request(
        SITE_CONFIGURATION,
        lambda: set_archived(SITE_CONFIGURATION, coordinator, input.slug, input.archived),
    )


@mcp.tool()
async def create_source(
    input: CreateSourceInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Create an empty source; the slug is derived from title and author.

    Returns:
        {"success": True, "message": "Source created", "slug": str, ...}

    Error Handling:
        - Source already exists → status 400
    """
    return run_request(
        SITE_CONFIGURATION,
        lambda: create(SITE_CONFIGURATION, coordinator, input.title, input.author, input.type, input.link),
    )


@mcp.tool()
async def capture_bookmark(
    input: CaptureBookmarkInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Bookmark a moment in a podcast episode as a note on the episode's source.

    Creates the podcast source on the first bookmark of an episode.

    Returns:
        {"success": True, "slug": str, "timestamp": str, "noteIndex": int, "isNew": bool, ...}
    """
    return run_request(
        SITE_CONFIGURATION,
        lambda: bookmark(
            SITE_CONFIGURATION,
            coordinator,
            input.episode_title,
            input.show_name,
            input.publisher,
            input.link,
            note=input.note,
            progress_ms=input.progress_ms,
        ),
    )
