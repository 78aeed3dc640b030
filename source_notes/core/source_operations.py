"""Read-modify-write operations on source documents.

Each operation reads the whole source, decodes its frontmatter, applies a pure
edit and hands the re-encoded document to the :class:`PersistenceCoordinator`.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from source_notes.constants import MAX_BOOKMARK_SLUG_LENGTH, SOURCE_TYPES
from source_notes.core.collection_operations import (
    document_display_name,
    ensure_collection_ready,
    resolve_document_path,
)
from source_notes.core.frontmatter_operations import decode_document, encode_document, fields_for
from source_notes.core.note_blocks import parse_notes
from source_notes.core.note_operations import (
    append_note,
    apply_note_operation,
    normalize_tags,
)
from source_notes.core.persistence import PersistenceCoordinator
from source_notes.data_models import CollectionMetadata, SiteConfiguration
from source_notes.errors import (
    DocumentExistsError,
    DocumentNotFoundError,
    InvalidArgumentError,
    MalformedDocumentError,
)

logger = logging.getLogger(__name__)

SOURCES = "sources"


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def slugify(text: str, max_length: Optional[int] = None) -> str:
    """Derive a file-safe slug from free text.

    Examples:
        >>> slugify("Thinking, Fast and Slow Daniel Kahneman")
        'thinking-fast-and-slow-daniel-kahneman'
    """
    slug = re.sub(r"[^a-z0-9\s-]", "", text.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    if max_length is not None:
        slug = slug[:max_length].rstrip("-")
    return slug


def format_playback_offset(progress_ms: int) -> str:
    """Format a playback offset as ``M:SS``."""
    total_seconds = progress_ms // 1000
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def coerce_date(value: Any) -> date | datetime:
    """Accept a date, datetime or ISO-8601 string for a ``date`` field.

    Raises:
        InvalidArgumentError: If the value is not a date.
    """
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise InvalidArgumentError(f"Invalid date: {value!r}") from exc
    raise InvalidArgumentError(f"Invalid date: {value!r}")


def open_collection(site: SiteConfiguration, name: str) -> CollectionMetadata:
    collection = site.get(name)
    ensure_collection_ready(collection)
    return collection


def load_document(
    site: SiteConfiguration,
    name: str,
    slug: str,
    label: str,
) -> tuple[CollectionMetadata, Path, dict[str, Any], str]:
    """Load a document of collection ``name`` and split it into frontmatter and body.

    ``label`` names the document kind in error messages (``Source``, ``Post``).

    Raises:
        InvalidArgumentError: If the slug is unsafe.
        DocumentNotFoundError: If no document exists for the slug.
        MalformedDocumentError: If the file is not UTF-8 or has no frontmatter.
    """
    collection = open_collection(site, name)
    path = resolve_document_path(collection, slug)
    if not path.is_file():
        raise DocumentNotFoundError(f"{label} not found: {slug}")

    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDocumentError(
            f"{label} '{slug}' is not UTF-8 encoded and cannot be processed."
        ) from exc

    try:
        metadata, body = decode_document(raw)
    except MalformedDocumentError as exc:
        raise MalformedDocumentError(f"{label} '{slug}' is malformed: {exc}") from exc
    return collection, path, metadata, body


def encode_for(collection: CollectionMetadata, metadata: Mapping[str, Any], body: str) -> str:
    """Encode a document with the frontmatter schema of its collection."""
    return encode_document(metadata, body, fields_for(collection.name))


def _sources(site: SiteConfiguration) -> CollectionMetadata:
    return open_collection(site, SOURCES)


def _load_source(site: SiteConfiguration, slug: str) -> tuple[CollectionMetadata, Path, dict[str, Any], str]:
    return load_document(site, SOURCES, slug, "Source")


def _result(collection: CollectionMetadata, path: Path, status: str, **fields: Any) -> dict[str, Any]:
    return {
        "source": document_display_name(collection, path),
        "path": str(path),
        "status": status,
        **fields,
    }


# ==============================================================================
# SOURCE OPERATIONS
# ==============================================================================


def list_source_notes(site: SiteConfiguration, slug: str) -> dict[str, Any]:
    """List every note of a source with the index used to address it.

    Returns:
        Dictionary with source, path, title, sourceTags and notes.
    """
    collection, path, metadata, body = _load_source(site, slug)
    notes = parse_notes(body, site.link_keys)
    return _result(
        collection,
        path,
        "read",
        message=f"{len(notes)} notes",
        title=metadata.get("title"),
        sourceTags=list(metadata.get("tags") or []),
        notes=[note.as_payload() for note in notes],
    )


def edit_source_note(
    site: SiteConfiguration,
    coordinator: PersistenceCoordinator,
    operation: Any,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Apply a tagged note operation to a source and persist the result.

    Args:
        site: Site configuration.
        coordinator: Persistence coordinator used for the write.
        operation: A validated note operation model (see ``source_notes.models``).
        now: Clock override for appended note timestamps.

    Returns:
        Dictionary with source, path, status, message and operation fields
        (``sourceTags`` for update-tags, ``published`` for toggle-published,
        ``timestamp``/``noteIndex`` for all).

    Raises:
        DocumentNotFoundError: If the source does not exist.
        NoteNotFoundError: If the referenced note does not exist.
        InvalidArgumentError: If the slug or payload is invalid.
        MalformedDocumentError: If the source cannot be decoded.
        PersistenceError: If a synchronous write fails.
    """
    collection, path, metadata, body = _load_source(site, operation.slug)
    result = apply_note_operation(body, metadata, operation, site.link_keys, now=now)
    output = encode_for(collection, result.frontmatter, result.body)

    action = operation.operation
    suffix = "note" if action == "append" else f"note {action}"
    coordinator.commit(path, output, f"Auto-save: {operation.slug} ({suffix})")

    logger.info(
        "Applied note %s to note %s in source '%s'",
        action,
        result.details.get("noteIndex"),
        operation.slug,
    )
    return _result(collection, path, action, **result.details)


def update_source_metadata(
    site: SiteConfiguration,
    coordinator: PersistenceCoordinator,
    slug: str,
    updates: Mapping[str, Any],
) -> dict[str, Any]:
    """Set source frontmatter fields (title, author, type, link, date, tags).

    Raises:
        InvalidArgumentError: If a field is unknown or has an invalid value.
        DocumentNotFoundError: If the source does not exist.
    """
    allowed = {"title", "author", "type", "link", "date", "tags"}
    unknown = sorted(set(updates) - allowed)
    if unknown:
        raise InvalidArgumentError(f"Unknown source fields: {', '.join(unknown)}")

    collection, path, metadata, body = _load_source(site, slug)
    for key, value in updates.items():
        if value is None:
            continue
        if key == "type" and value not in SOURCE_TYPES:
            raise InvalidArgumentError(
                f"Invalid type '{value}'. Must be one of: {', '.join(SOURCE_TYPES)}"
            )
        if key == "date":
            value = coerce_date(value)
        elif key == "tags":
            value = normalize_tags(value)
        metadata[key] = value

    coordinator.commit(path, encode_for(collection, metadata, body), f"Auto-save: {slug} (source edit)")
    fields_updated = sorted(key for key, value in updates.items() if value is not None)
    logger.info("Updated source '%s' (fields=%s)", slug, ", ".join(fields_updated) or "none")
    return _result(
        collection,
        path,
        "updated",
        message="Source saved",
        fields_updated=fields_updated,
    )


def set_source_archived(
    site: SiteConfiguration,
    coordinator: PersistenceCoordinator,
    slug: str,
    archived: bool,
) -> dict[str, Any]:
    """Archive or restore a source."""
    collection, path, metadata, body = _load_source(site, slug)
    metadata["archived"] = archived is True
    coordinator.commit(path, encode_for(collection, metadata, body), f"Auto-save: {slug} (source edit)")
    logger.info("Set archived=%s on source '%s'", metadata["archived"], slug)
    return _result(
        collection,
        path,
        "archived" if metadata["archived"] else "restored",
        message="Source saved",
        archived=metadata["archived"],
    )


def create_source(
    site: SiteConfiguration,
    coordinator: PersistenceCoordinator,
    title: str,
    author: str,
    source_type: str = "book",
    link: Optional[str] = None,
    today: Optional[date] = None,
) -> dict[str, Any]:
    """Create an empty source whose slug is derived from title and author.

    Raises:
        InvalidArgumentError: If title/author are blank or the type is unknown.
        DocumentExistsError: If a source with the derived slug already exists.
    """
    title = (title or "").strip()
    author = (author or "").strip()
    if not title:
        raise InvalidArgumentError("Please provide a source title")
    if not author:
        raise InvalidArgumentError("Please provide an author")
    if source_type not in SOURCE_TYPES:
        raise InvalidArgumentError(
            f"Invalid type \"{source_type}\". Must be one of: {', '.join(SOURCE_TYPES)}"
        )

    slug = slugify(f"{title} {author}")
    collection = _sources(site)
    path = resolve_document_path(collection, slug)
    if path.exists():
        raise DocumentExistsError(f"Source already exists: {slug}")

    metadata = {
        "title": title,
        "author": author,
        "type": source_type,
        "link": link,
        "date": today or datetime.now(timezone.utc).date(),
    }
    coordinator.commit(path, encode_for(collection, metadata, ""), f"Auto-save: {slug} (new source)")
    logger.info("Created source '%s'", slug)
    return _result(collection, path, "created", message="Source created", slug=slug)


def capture_bookmark(
    site: SiteConfiguration,
    coordinator: PersistenceCoordinator,
    episode_title: str,
    show_name: str,
    publisher: str,
    link: str,
    note: Optional[str] = None,
    progress_ms: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Record a podcast moment as a note, creating the episode's source if needed.

    The note carries ``link`` under the first configured link key. Without note
    text, ``Bookmarked at M:SS`` is used.

    Returns:
        Dictionary with source, path, status, slug, timestamp, noteIndex and isNew.
    """
    slug = slugify(f"{episode_title} {show_name}", MAX_BOOKMARK_SLUG_LENGTH)
    if not slug:
        raise InvalidArgumentError("Episode title and show name produce an empty slug")

    offset = format_playback_offset(progress_ms or 0)
    content = (note or "").strip() or f"Bookmarked at {offset}"
    collection = _sources(site)
    path = resolve_document_path(collection, slug)
    is_new = not path.exists()

    if is_new:
        existing_body = ""
        metadata: dict[str, Any] = {
            "title": episode_title,
            "author": publisher,
            "type": "podcast",
            "link": link,
            "date": (now or datetime.now(timezone.utc)).date(),
        }
    else:
        collection, path, metadata, existing_body = _load_source(site, slug)

    edit = append_note(existing_body, metadata, content, link=link, link_keys=site.link_keys, now=now)
    body, metadata = edit.body, edit.frontmatter
    timestamp, note_index = edit.details["timestamp"], edit.details["noteIndex"]

    coordinator.commit(path, encode_for(collection, metadata, body), f"bookmark: {slug}")
    logger.info("Bookmarked %s in source '%s' (new=%s)", offset, slug, is_new)
    return _result(
        collection,
        path,
        "bookmarked",
        message="Bookmark saved",
        slug=slug,
        episode=episode_title,
        show=show_name,
        offset=offset,
        timestamp=timestamp,
        noteIndex=note_index,
        isNew=is_new,
    )
