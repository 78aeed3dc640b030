"""Frontmatter edits on essay posts.

Post bodies are written in the browser editor and are not touched here; only
the frontmatter fields of the posts schema change.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from source_notes.constants import POST_CATEGORIES
from source_notes.core.collection_operations import document_display_name
from source_notes.core.note_operations import normalize_tags
from source_notes.core.persistence import PersistenceCoordinator
from source_notes.core.source_operations import coerce_date, encode_for, load_document
from source_notes.data_models import SiteConfiguration
from source_notes.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

POSTS = "posts"

EDITABLE_POST_FIELDS = frozenset({"title", "description", "date", "draft", "tags", "category", "featureImage"})


def update_post_metadata(
    site: SiteConfiguration,
    coordinator: PersistenceCoordinator,
    slug: str,
    updates: Mapping[str, Any],
) -> dict[str, Any]:
    """Set post frontmatter fields, e.g. publish a draft with ``{"draft": False}``.

    Args:
        site: Site configuration (must define a ``posts`` collection).
        coordinator: Persistence coordinator used for the write.
        slug: Post slug.
        updates: Field values; ``None`` values are ignored.

    Returns:
        Dictionary with post, path, status, message and fields_updated.

    Raises:
        InvalidArgumentError: If a field is unknown or has an invalid value.
        DocumentNotFoundError: If the post does not exist.
    """
    unknown = sorted(set(updates) - EDITABLE_POST_FIELDS)
    if unknown:
        raise InvalidArgumentError(f"Unknown post fields: {', '.join(unknown)}")

    collection, path, metadata, body = load_document(site, POSTS, slug, "Post")
    for key, value in updates.items():
        if value is None:
            continue
        if key == "draft" and not isinstance(value, bool):
            raise InvalidArgumentError("draft must be a boolean")
        if key == "category" and value not in POST_CATEGORIES:
            raise InvalidArgumentError(
                f"Invalid category '{value}'. Must be one of: {', '.join(POST_CATEGORIES)}"
            )
        if key == "date":
            value = coerce_date(value)
        elif key == "tags":
            value = normalize_tags(value)
        metadata[key] = value

    coordinator.commit(path, encode_for(collection, metadata, body), f"Auto-save: {slug} (post edit)")
    fields_updated = sorted(key for key, value in updates.items() if value is not None)
    logger.info("Updated post '%s' (fields=%s)", slug, ", ".join(fields_updated) or "none")
    return {
        "post": document_display_name(collection, path),
        "path": str(path),
        "status": "updated",
        "message": "Post saved successfully",
        "fields_updated": fields_updated,
        "draft": metadata.get("draft", False),
    }
