"""Note block mutations over a source body.

Every function here is pure: it takes the current body (and frontmatter where
aggregate tags are involved) and returns new values. Only the text inside the
target block's span changes; bytes before the header and after the block end
are carried over untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from source_notes.constants import DEFAULT_LINK_KEYS, TIMESTAMP_FORMAT
from source_notes.core.note_blocks import (
    HEADER_PATTERN,
    PUBLISHED_KEY,
    PUBLISHED_VALUES,
    TAGS_KEY,
    NoteBlock,
    aggregate_tags,
    is_meta_line,
    locate_note,
    parse_notes,
    scan_blocks,
)
from source_notes.errors import InvalidArgumentError
from source_notes.models.note_models import (
    AppendNoteInput,
    DeleteNoteInput,
    ReplaceNoteContentInput,
    ToggleNotePublishedInput,
    UpdateNoteTagsInput,
)

logger = logging.getLogger(__name__)


@dataclass
class NoteEditResult:
    """New body and frontmatter after an edit, plus response fields."""

    body: str
    frontmatter: dict[str, Any]
    details: dict[str, Any] = field(default_factory=dict)


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def current_timestamp(now: Optional[datetime] = None) -> str:
    """Return a note timestamp (UTC, truncated to the minute)."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def normalize_tags(tags: Any) -> list[str]:
    """Validate a tag payload and return it as an ordered, de-duplicated list.

    Raises:
        InvalidArgumentError: If ``tags`` is not a list of strings, or a tag
            would break the comment it is stored in.
    """
    if not isinstance(tags, (list, tuple)):
        raise InvalidArgumentError("tags must be an array")

    normalized: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            raise InvalidArgumentError("tags must be an array of strings")
        cleaned = tag.strip()
        if "\n" in cleaned or "," in cleaned or "-->" in cleaned:
            raise InvalidArgumentError(f"Invalid tag: {cleaned!r}")
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


def _check_content(content: str, link_keys: Iterable[str] = DEFAULT_LINK_KEYS) -> str:
    for line in content.splitlines():
        if HEADER_PATTERN.match(line.strip()):
            raise InvalidArgumentError("Note content cannot contain a note header line")
    cleaned = content.strip()
    # The first content line would otherwise be absorbed into the metadata.
    if cleaned and is_meta_line(cleaned.split("\n", 1)[0], link_keys):
        raise InvalidArgumentError("Note content cannot start with a note metadata line")
    return cleaned


def link_key_for(link_keys: Iterable[str]) -> str:
    """Return the key new external links are stored under.

    Raises:
        InvalidArgumentError: If no link key is configured.
    """
    for key in link_keys:
        return key
    raise InvalidArgumentError("No link key configured for external links")


def _tags_line(tags: list[str]) -> str:
    return f"<!-- {TAGS_KEY}: {', '.join(tags)} -->"


def build_note_block(
    content: str,
    timestamp: str,
    tags: Iterable[str] = (),
    published: bool = False,
    link: Optional[str] = None,
    link_key: str = DEFAULT_LINK_KEYS[0],
) -> str:
    """Build the text of a new note block.

    The block starts with a newline so it can be appended directly after
    existing text, and ends with the content (no trailing newline).
    """
    tags = list(tags)
    lines = [f"<!-- note: {timestamp} -->"]
    if tags:
        lines.append(_tags_line(tags))
    lines.append(f"<!-- {PUBLISHED_KEY}: {'true' if published else 'false'} -->")
    if link:
        lines.append(f"<!-- {link_key}: {link} -->")
    lines.append(content)
    return "\n" + "\n".join(lines)


# ==============================================================================
# MUTATIONS
# ==============================================================================


def append_note(
    body: str,
    frontmatter: Mapping[str, Any],
    content: str,
    tags: Any = None,
    published: bool = False,
    link: Optional[str] = None,
    link_keys: Iterable[str] = DEFAULT_LINK_KEYS,
    now: Optional[datetime] = None,
) -> NoteEditResult:
    """Append a new note to the end of ``body``.

    Trailing whitespace of the existing body is trimmed and the new block is
    separated from it by one blank line. When the note carries tags the
    frontmatter ``tags`` are recomputed from every note.

    Raises:
        InvalidArgumentError: If the content is blank or starts with a metadata
            line, the tags are invalid, or a link is given with no link key
            configured.
    """
    link_keys = tuple(link_keys)
    cleaned = _check_content(content, link_keys)
    if not cleaned:
        raise InvalidArgumentError("Note content is required")
    tags = normalize_tags(tags if tags is not None else [])
    link = link.strip() if link else None
    link_key = link_key_for(link_keys) if link else DEFAULT_LINK_KEYS[0]

    timestamp = current_timestamp(now)
    block = build_note_block(cleaned, timestamp, tags, published, link, link_key)
    existing = body.rstrip()
    new_body = existing + "\n" + block if existing else block

    updated = dict(frontmatter)
    if tags:
        updated["tags"] = aggregate_tags(parse_notes(new_body, link_keys))

    return NoteEditResult(
        body=new_body,
        frontmatter=updated,
        details={
            "timestamp": timestamp,
            "noteIndex": len(scan_blocks(new_body, link_keys)) - 1,
        },
    )


def replace_note_content(
    body: str,
    block: NoteBlock,
    content: str,
    link_keys: Iterable[str] = DEFAULT_LINK_KEYS,
) -> str:
    """Rewrite a note's free text, keeping its header and metadata lines verbatim.

    Raises:
        InvalidArgumentError: If the content holds a note header line or starts
            with a metadata line.
    """
    kept = [block.header.text] + [line.text for line in block.meta_lines]
    new_block = "\n".join(kept) + "\n" + _check_content(content, link_keys) + "\n\n"
    return body[: block.start] + new_block + body[block.end :]


def toggle_published(body: str, block: NoteBlock) -> tuple[str, Optional[bool]]:
    """Flip the note's ``published`` line.

    Notes without a published line are left alone; no line is added.

    Returns:
        ``(new_body, published)`` where ``published`` is the new state, or
        ``None`` when the note had no published line.
    """
    line = block.meta(PUBLISHED_KEY)
    if line is None:
        logger.info("Note %d (%s) has no published line; nothing to toggle", block.index, block.timestamp)
        return body, None

    published = not PUBLISHED_VALUES[line.value or "false"]
    new_text = line.text.replace(
        f"{PUBLISHED_KEY}: {line.value}",
        f"{PUBLISHED_KEY}: {'true' if published else 'false'}",
        1,
    )
    line_end = line.start + len(line.text)
    return body[: line.start] + new_text + body[line_end:], published


def set_note_tags(body: str, block: NoteBlock, tags: list[str]) -> str:
    """Replace, remove or insert the note's tags line.

    - tags line present, new tags: the line is rewritten in place
    - tags line present, no tags: the line and its terminator are removed
    - no tags line, new tags: a line is inserted right after the header
    - no tags line, no tags: unchanged
    """
    existing = block.meta(TAGS_KEY)
    if existing is not None and tags:
        indent = existing.text[: len(existing.text) - len(existing.text.lstrip())]
        line_end = existing.start + len(existing.text)
        return body[: existing.start] + indent + _tags_line(tags) + body[line_end:]
    if existing is not None:
        return body[: existing.start] + body[existing.end :]
    if tags:
        header_end = block.header.start + len(block.header.text)
        return body[:header_end] + "\n" + _tags_line(tags) + body[header_end:]
    return body


def update_note_tags(
    body: str,
    frontmatter: Mapping[str, Any],
    block: NoteBlock,
    tags: Any,
    link_keys: Iterable[str] = DEFAULT_LINK_KEYS,
) -> NoteEditResult:
    """Set a note's tags and recompute the frontmatter aggregate tags.

    Raises:
        InvalidArgumentError: If ``tags`` is not a list of strings.
    """
    link_keys = tuple(link_keys)
    tags = normalize_tags(tags)
    new_body = set_note_tags(body, block, tags)

    updated = dict(frontmatter)
    updated["tags"] = aggregate_tags(parse_notes(new_body, link_keys))
    return NoteEditResult(
        body=new_body,
        frontmatter=updated,
        details={"tags": tags, "sourceTags": updated["tags"]},
    )


def delete_note(body: str, block: NoteBlock) -> str:
    """Remove the note block from its header up to the next header or end of body."""
    return body[: block.start] + body[block.end :]


# ==============================================================================
# DISPATCH
# ==============================================================================


def apply_note_operation(
    body: str,
    frontmatter: Mapping[str, Any],
    operation: Any,
    link_keys: Iterable[str] = DEFAULT_LINK_KEYS,
    now: Optional[datetime] = None,
) -> NoteEditResult:
    """Apply one tagged note operation to a body.

    Args:
        body: Current document body.
        frontmatter: Current frontmatter mapping (not modified).
        operation: One of the models in :data:`source_notes.models.NoteOperationInput`.
        link_keys: Metadata keys that hold an external link.
        now: Clock override for new note timestamps.

    Returns:
        A :class:`NoteEditResult` with the new body, frontmatter and response fields.

    Raises:
        NoteNotFoundError: If the referenced note does not exist.
        InvalidArgumentError: If the payload is invalid or the operation unknown.
    """
    link_keys = tuple(link_keys)

    if isinstance(operation, AppendNoteInput):
        result = append_note(
            body,
            frontmatter,
            operation.content,
            tags=operation.tags,
            published=operation.published,
            link=operation.link,
            link_keys=link_keys,
            now=now,
        )
        result.details["message"] = "Note saved"
        return result

    if not isinstance(
        operation,
        (ReplaceNoteContentInput, ToggleNotePublishedInput, UpdateNoteTagsInput, DeleteNoteInput),
    ):
        raise InvalidArgumentError(f"Unsupported note operation: {type(operation).__name__}")

    block = locate_note(body, operation.timestamp, operation.note_index, link_keys)
    details: dict[str, Any] = {"timestamp": block.timestamp, "noteIndex": block.index}

    if isinstance(operation, UpdateNoteTagsInput):
        result = update_note_tags(body, frontmatter, block, operation.tags, link_keys)
        result.details = {**details, **result.details, "message": "Note updated"}
        return result

    if isinstance(operation, ReplaceNoteContentInput):
        new_body = replace_note_content(body, block, operation.content, link_keys)
        details["message"] = "Note updated"
    elif isinstance(operation, ToggleNotePublishedInput):
        new_body, published = toggle_published(body, block)
        details["published"] = published
        details["message"] = "Note updated"
    else:
        new_body = delete_note(body, block)
        details["message"] = "Note deleted"

    return NoteEditResult(body=new_body, frontmatter=dict(frontmatter), details=details)
