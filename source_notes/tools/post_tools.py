"""Post frontmatter MCP tools.

Post bodies are edited in the browser; these tools only change frontmatter
(title, description, date, draft, tags, category, featureImage).
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import Context

from source_notes.config import SITE_CONFIGURATION
from source_notes.server import mcp, coordinator
from source_notes.models import UpdatePostMetadataInput
from source_notes.core.request_handlers import run_request
from source_notes.core.post_operations import update_post_metadata as update_metadata


@mcp.tool()
async def update_post_metadata(
    input: UpdatePostMetadataInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Save post frontmatter fields. Pass ``draft: false`` to publish a draft.

    Args:
        input (UpdatePostMetadataInput): Validated input containing:
            - slug (str): Post slug
            - title, description, date, draft, tags, category, featureImage (optional)

    Returns:
        {"success": True, "message": "Post saved successfully", "fields_updated": list[str], "draft": bool, ...}

    Error Handling:
        - Post not found → status 404
        - Unknown category → status 400
    """
    return run_request(
        SITE_CONFIGURATION,
        lambda: update_metadata(SITE_CONFIGURATION, coordinator, input.slug, input.updates()),
    )
