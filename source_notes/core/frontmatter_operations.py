"""YAML frontmatter decoding and encoding for site documents."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Any

import frontmatter
import yaml

from source_notes.constants import POST_FIELDS, SOURCE_FIELDS
from source_notes.errors import MalformedDocumentError

logger = logging.getLogger(__name__)

# Leading ``---`` block; the closing delimiter must sit on its own line.
FRONTMATTER_BLOCK = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?\r?\n)?---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)

# Characters that would change the meaning of a plain YAML scalar.
NEEDS_QUOTING = re.compile(r"[:\"'#{}\[\]&*?|>!%@`\n]")

FIELDS_BY_COLLECTION = {
    "sources": SOURCE_FIELDS,
    "posts": POST_FIELDS,
}

# Boolean fields that are only written when set.
OMIT_WHEN_FALSE = frozenset({"archived"})


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _plain_round_trips(value: str) -> bool:
    try:
        return yaml.safe_load(value) == value
    except yaml.YAMLError:
        return False


def yaml_scalar(value: str) -> str:
    """Render a string as a YAML scalar, single-quoting it when needed.

    A value stays plain only when it has none of the indicator characters,
    no leading ``-``/``?`` or surrounding whitespace, and loads back as the
    same string (so ``null``, ``true`` and ``123`` are quoted). Embedded
    single quotes are doubled, which is the only escape single-quoted YAML
    scalars support.

    Examples:
        >>> yaml_scalar("Plain title")
        'Plain title'
        >>> yaml_scalar("Title: it's here")
        "'Title: it''s here'"
        >>> yaml_scalar("null")
        "'null'"
    """
    if value == "":
        return "''"
    plain = (
        not NEEDS_QUOTING.search(value)
        and value[0] not in "-?"
        and value == value.strip()
        and _plain_round_trips(value)
    )
    if plain:
        return value
    return "'" + value.replace("'", "''") + "'"


def format_instant(value: date | datetime) -> str:
    """Format a date or datetime as an ISO-8601 UTC instant with milliseconds.

    Naive datetimes are taken to be UTC; bare dates become midnight UTC.
    """
    if isinstance(value, datetime):
        instant = value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value
        instant = instant.astimezone(timezone.utc)
    else:
        instant = datetime.combine(value, time(0, 0), tzinfo=timezone.utc)
    return f"{instant:%Y-%m-%dT%H:%M:%S}.{instant.microsecond // 1000:03d}Z"


def _is_date_literal(value: str) -> bool:
    try:
        return isinstance(yaml.safe_load(value), (date, datetime))
    except yaml.YAMLError:
        return False


def _format_value(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return format_instant(value)
    if isinstance(value, (int, float)):
        return str(value)
    if key == "date" and isinstance(value, str) and _is_date_literal(value):
        # Keep caller-supplied date strings unquoted so they load back as dates.
        return value
    return yaml_scalar(str(value))


def fields_for(collection: str) -> tuple[str, ...]:
    """Return the recognized frontmatter keys for a collection, in emission order.

    Raises:
        ValueError: If the collection has no known schema.
    """
    try:
        return FIELDS_BY_COLLECTION[collection]
    except KeyError as exc:
        raise ValueError(f"No frontmatter schema for collection '{collection}'") from exc


# ==============================================================================
# CODEC
# ==============================================================================


def decode_document(raw: str) -> tuple[dict[str, Any], str]:
    """Split a document into its frontmatter mapping and body text.

    The body is returned byte-for-byte as it follows the closing delimiter line,
    including any leading blank line, so edits never shift unrelated content.

    Args:
        raw: Full document text.

    Returns:
        A tuple of ``(frontmatter, body)``.

    Raises:
        MalformedDocumentError: If the ``---`` block is missing, unterminated, or
            does not contain valid YAML.
    """
    match = FRONTMATTER_BLOCK.match(raw)
    if not match:
        raise MalformedDocumentError(
            "Document does not start with a terminated '---' frontmatter block."
        )

    try:
        post = frontmatter.loads(raw)
    except yaml.YAMLError as exc:
        raise MalformedDocumentError(f"Frontmatter contains invalid YAML: {exc}") from exc

    metadata = dict(post.metadata or {})
    return metadata, raw[match.end():]


def encode_document(
    metadata: Mapping[str, Any],
    body: str,
    fields: tuple[str, ...] = SOURCE_FIELDS,
) -> str:
    """Serialize frontmatter and body back into a document.

    Only keys listed in ``fields`` are written, in that order; anything else is
    dropped. Lists become block sequences and are omitted when empty.

    Args:
        metadata: Frontmatter mapping, typically from :func:`decode_document`.
        body: Document body, appended verbatim after the closing delimiter.
        fields: Recognized keys for the document's collection.

    Returns:
        The full document text.
    """
    lines = ["---"]
    for key in fields:
        value = metadata.get(key)
        if value is None:
            continue
        if key in OMIT_WHEN_FALSE and value is not True:
            continue
        if isinstance(value, (list, tuple)):
            if value:
                lines.append(f"{key}:")
                lines.extend(f"  - {_format_value(key, item)}" for item in value)
            continue
        lines.append(f"{key}: {_format_value(key, value)}")
    lines.append("---")

    dropped = sorted(set(metadata) - set(fields))
    if dropped:
        logger.debug("Dropping unrecognized frontmatter keys: %s", ", ".join(dropped))

    return "\n".join(lines) + "\n" + body
