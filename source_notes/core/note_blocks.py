"""Note block scanning and lookup within a source body.

A note is a run of lines introduced by a header comment::

    <!-- note: 2026-02-27T09:22 -->
    <!-- tags: agentic-coding, productivity -->
    <!-- published: false -->
    <!-- spotify: https://open.spotify.com/episode/abc?t=754 -->
    Free text content, possibly spanning several paragraphs.

The body is classified line by line in a single forward pass. Metadata comments
are only recognized directly below a header (blank lines between them are
allowed); the first other line starts the content. A block runs from its header
line up to the next header line, or to the end of the body.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from source_notes.constants import DEFAULT_LINK_KEYS
from source_notes.errors import NoteNotFoundError

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(r"^<!-- note: (?P<timestamp>.+?) -->$")
META_PATTERN = re.compile(r"^<!-- (?P<key>[A-Za-z][\w-]*): (?P<value>.+?) -->$")

TAGS_KEY = "tags"
PUBLISHED_KEY = "published"
PUBLISHED_VALUES = {"true": True, "false": False}


class LineKind(str, Enum):
    HEADER = "header"
    META = "meta"
    BLANK = "blank"
    CONTENT = "content"


@dataclass(frozen=True)
class BodyLine:
    """One classified line of a body.

    ``start`` and ``end`` are string offsets into the body; ``end`` is just past
    the line terminator (or the end of the body for a final unterminated line).
    ``text`` never includes the terminator.
    """

    kind: LineKind
    start: int
    end: int
    text: str
    key: Optional[str] = None
    value: Optional[str] = None


@dataclass(frozen=True)
class NoteBlock:
    """The span of one note inside a body."""

    index: int
    timestamp: str
    start: int
    end: int
    lines: tuple[BodyLine, ...]

    @property
    def header(self) -> BodyLine:
        return self.lines[0]

    @property
    def meta_lines(self) -> tuple[BodyLine, ...]:
        return tuple(line for line in self.lines if line.kind is LineKind.META)

    def meta(self, key: str) -> Optional[BodyLine]:
        """Return the first metadata line for ``key``, if any."""
        for line in self.meta_lines:
            if line.key == key:
                return line
        return None


@dataclass(frozen=True)
class Note:
    """A parsed view of a note block."""

    timestamp: str
    position_index: int
    content: str
    tags: list[str] = field(default_factory=list)
    published: bool = False
    external_link: Optional[str] = None
    link_key: Optional[str] = None

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable payload representation."""
        payload: dict[str, Any] = {
            "timestamp": self.timestamp,
            "noteIndex": self.position_index,
            "tags": list(self.tags),
            "published": self.published,
            "content": self.content,
        }
        if self.external_link is not None:
            payload["externalLink"] = self.external_link
            payload["linkKey"] = self.link_key
        return payload


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def split_tags(value: str) -> list[str]:
    """Split a stored ``a, b, c`` tag list, dropping empty entries."""
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def _match_meta(stripped: str, meta_keys: frozenset[str]) -> Optional[re.Match[str]]:
    match = META_PATTERN.match(stripped)
    if not match or match.group("key") not in meta_keys:
        return None
    if match.group("key") == PUBLISHED_KEY and match.group("value") not in PUBLISHED_VALUES:
        return None
    return match


def is_meta_line(text: str, link_keys: Iterable[str] = DEFAULT_LINK_KEYS) -> bool:
    """Return whether ``text`` would be read as a metadata line right below a header."""
    meta_keys = frozenset({TAGS_KEY, PUBLISHED_KEY, *link_keys})
    return _match_meta(text.strip(), meta_keys) is not None


def scan_lines(body: str, link_keys: Iterable[str] = DEFAULT_LINK_KEYS) -> list[BodyLine]:
    """Classify every line of ``body`` in document order.

    Args:
        body: Document body (without frontmatter).
        link_keys: Metadata keys that hold an external link.

    Returns:
        One :class:`BodyLine` per line. Offsets cover the body contiguously.
    """
    meta_keys = frozenset({TAGS_KEY, PUBLISHED_KEY, *link_keys})
    lines: list[BodyLine] = []
    pieces = body.split("\n")
    offset = 0
    in_meta = False

    for number, piece in enumerate(pieces):
        is_last = number == len(pieces) - 1
        if is_last and not piece:
            break
        end = offset + len(piece) + (0 if is_last else 1)
        text = piece[:-1] if piece.endswith("\r") else piece
        stripped = text.strip()

        header = HEADER_PATTERN.match(stripped)
        meta = _match_meta(stripped, meta_keys) if in_meta else None
        if header:
            line = BodyLine(LineKind.HEADER, offset, end, text, value=header.group("timestamp").strip())
            in_meta = True
        elif not stripped:
            line = BodyLine(LineKind.BLANK, offset, end, text)
        elif meta:
            line = BodyLine(LineKind.META, offset, end, text, key=meta.group("key"), value=meta.group("value").strip())
        else:
            line = BodyLine(LineKind.CONTENT, offset, end, text)
            in_meta = False

        lines.append(line)
        offset = end

    return lines


def scan_blocks(body: str, link_keys: Iterable[str] = DEFAULT_LINK_KEYS) -> list[NoteBlock]:
    """Return every note block in ``body`` in document order.

    Prose before the first header belongs to no block.
    """
    blocks: list[NoteBlock] = []
    current: list[BodyLine] = []

    def _close(end: int) -> None:
        header = current[0]
        blocks.append(
            NoteBlock(
                index=len(blocks),
                timestamp=header.value or "",
                start=header.start,
                end=end,
                lines=tuple(current),
            )
        )

    for line in scan_lines(body, link_keys):
        if line.kind is LineKind.HEADER:
            if current:
                _close(line.start)
            current = [line]
        elif current:
            current.append(line)

    if current:
        _close(len(body))
    return blocks


def note_from_block(block: NoteBlock) -> Note:
    """Build the parsed :class:`Note` view of a block."""
    tags: list[str] = []
    published = False
    external_link: Optional[str] = None
    link_key: Optional[str] = None

    for line in block.meta_lines:
        if line.key == TAGS_KEY:
            tags = split_tags(line.value or "")
        elif line.key == PUBLISHED_KEY:
            published = PUBLISHED_VALUES[line.value or "false"]
        elif external_link is None:
            external_link = line.value
            link_key = line.key

    content = "\n".join(
        line.text for line in block.lines if line.kind in (LineKind.CONTENT, LineKind.BLANK)
    ).strip()
    return Note(
        timestamp=block.timestamp,
        position_index=block.index,
        content=content,
        tags=tags,
        published=published,
        external_link=external_link,
        link_key=link_key,
    )


# ==============================================================================
# QUERIES
# ==============================================================================


def parse_notes(body: str, link_keys: Iterable[str] = DEFAULT_LINK_KEYS) -> list[Note]:
    """Parse every note in ``body`` in document order."""
    return [note_from_block(block) for block in scan_blocks(body, link_keys)]


def aggregate_tags(notes: Iterable[Note]) -> list[str]:
    """Return the sorted, de-duplicated union of all notes' tags."""
    return sorted({tag for note in notes for tag in note.tags})


def locate_note(
    body: str,
    timestamp: str,
    position_index: Optional[int] = None,
    link_keys: Iterable[str] = DEFAULT_LINK_KEYS,
) -> NoteBlock:
    """Find the block a note reference points at.

    An in-range ``position_index`` selects the block directly and is the only
    reliable way to address notes that share a timestamp. Without one (or when
    it is out of range) the first block whose timestamp equals ``timestamp`` is
    returned.

    Args:
        body: Document body.
        timestamp: Note timestamp as written in its header.
        position_index: Zero-based ordinal of the note among all notes.
        link_keys: Metadata keys that hold an external link.

    Returns:
        The located :class:`NoteBlock`.

    Raises:
        NoteNotFoundError: If nothing matches.
    """
    blocks = scan_blocks(body, link_keys)

    if position_index is not None:
        if 0 <= position_index < len(blocks):
            block = blocks[position_index]
            if block.timestamp != timestamp:
                logger.debug(
                    "Note index %d has timestamp '%s', request named '%s'",
                    position_index,
                    block.timestamp,
                    timestamp,
                )
            return block
        logger.warning(
            "Note index %d out of range (%d notes); falling back to timestamp '%s'",
            position_index,
            len(blocks),
            timestamp,
        )

    for block in blocks:
        if block.timestamp == timestamp:
            return block
    raise NoteNotFoundError(f"Note not found: {timestamp}")
