"""Tests for note block scanning, parsing and lookup."""

import pytest

from source_notes.core.note_blocks import (
    LineKind,
    aggregate_tags,
    locate_note,
    parse_notes,
    scan_blocks,
    scan_lines,
    split_tags,
)
from source_notes.errors import NoteNotFoundError


BODY = (
    "\n"
    "Intro paragraph before any note.\n"
    "\n"
    "<!-- note: 2026-02-26T18:04 -->\n"
    "<!-- tags: productivity -->\n"
    "<!-- published: true -->\n"
    "First note.\n"
    "\n"
    "<!-- note: 2026-02-27T09:22 -->\n"
    "<!-- published: false -->\n"
    "<!-- spotify: https://open.spotify.com/episode/abc?t=754 -->\n"
    "Second note.\n"
    "\n"
    "<!-- note: 2026-02-27T09:22 -->\n"
    "<!-- tags: agentic-coding, productivity -->\n"
    "<!-- published: false -->\n"
    "Third note, same minute.\n"
    "\n"
    "Still the third note.\n"
)


class TestParseNotes:
    """Parsed note views."""

    def test_parses_notes_in_document_order(self):
        notes = parse_notes(BODY)
        assert [note.timestamp for note in notes] == [
            "2026-02-26T18:04",
            "2026-02-27T09:22",
            "2026-02-27T09:22",
        ]
        assert [note.position_index for note in notes] == [0, 1, 2]

    def test_parses_metadata_lines(self):
        first, second, third = parse_notes(BODY)
        assert first.tags == ["productivity"]
        assert first.published is True
        assert second.tags == []
        assert second.published is False
        assert second.external_link == "https://open.spotify.com/episode/abc?t=754"
        assert second.link_key == "spotify"
        assert third.tags == ["agentic-coding", "productivity"]

    def test_content_spans_paragraphs_up_to_next_header(self):
        notes = parse_notes(BODY)
        assert notes[0].content == "First note."
        assert notes[2].content == "Third note, same minute.\n\nStill the third note."

    def test_missing_published_line_defaults_to_private(self):
        (note,) = parse_notes("<!-- note: 2026-01-01T00:00 -->\nText\n")
        assert note.published is False
        assert note.tags == []

    def test_blank_lines_between_metadata_are_allowed(self):
        body = "<!-- note: 2026-01-01T00:00 -->\n\n<!-- tags: a, b -->\n\n<!-- published: true -->\nText\n"
        (note,) = parse_notes(body)
        assert note.tags == ["a", "b"]
        assert note.published is True
        assert note.content == "Text"

    def test_metadata_after_content_is_content(self):
        body = "<!-- note: 2026-01-01T00:00 -->\nText\n<!-- tags: late -->\n"
        (note,) = parse_notes(body)
        assert note.tags == []
        assert note.content == "Text\n<!-- tags: late -->"

    def test_unknown_published_value_is_content(self):
        body = "<!-- note: 2026-01-01T00:00 -->\n<!-- published: maybe -->\nText\n"
        (note,) = parse_notes(body)
        assert note.published is False
        assert note.content == "<!-- published: maybe -->\nText"

    def test_configured_link_keys(self):
        body = "<!-- note: 2026-01-01T00:00 -->\n<!-- youtube: https://youtu.be/x -->\nText\n"
        assert parse_notes(body)[0].external_link is None
        (note,) = parse_notes(body, link_keys=("spotify", "youtube"))
        assert note.external_link == "https://youtu.be/x"
        assert note.link_key == "youtube"

    def test_indented_and_crlf_lines_are_recognized(self):
        body = "  <!-- note: 2026-01-01T00:00 -->\r\n<!-- published: true -->\r\nText\r\n"
        (note,) = parse_notes(body)
        assert note.timestamp == "2026-01-01T00:00"
        assert note.published is True
        assert note.content == "Text"

    def test_body_without_notes(self):
        assert parse_notes("Just prose.\n") == []
        assert parse_notes("") == []

    def test_payload_uses_index_and_link_fields(self):
        payload = parse_notes(BODY)[1].as_payload()
        assert payload["noteIndex"] == 1
        assert payload["externalLink"].startswith("https://open.spotify.com/")
        assert payload["linkKey"] == "spotify"
        assert "externalLink" not in parse_notes(BODY)[0].as_payload()


class TestScanBlocks:
    """Block spans."""

    def test_prose_before_first_header_is_not_a_block(self):
        blocks = scan_blocks(BODY)
        assert blocks[0].start == BODY.index("<!-- note:")

    def test_blocks_are_contiguous_to_end_of_body(self):
        blocks = scan_blocks(BODY)
        for current, following in zip(blocks, blocks[1:]):
            assert current.end == following.start
        assert blocks[-1].end == len(BODY)

    def test_block_text_starts_with_its_header(self):
        for block in scan_blocks(BODY):
            assert BODY[block.start:block.end].startswith(f"<!-- note: {block.timestamp} -->")

    def test_lines_cover_body(self):
        lines = scan_lines(BODY)
        assert lines[0].start == 0
        assert lines[-1].end == len(BODY)
        assert "".join(BODY[line.start:line.end] for line in lines) == BODY
        assert [line.kind for line in lines[3:6]] == [LineKind.HEADER, LineKind.META, LineKind.META]


class TestLocateNote:
    """Note lookup by index and timestamp."""

    def test_index_selects_among_duplicate_timestamps(self):
        block = locate_note(BODY, "2026-02-27T09:22", 2)
        assert block.index == 2

    def test_timestamp_only_returns_first_match(self):
        block = locate_note(BODY, "2026-02-27T09:22")
        assert block.index == 1

    def test_in_range_index_wins_over_timestamp(self):
        block = locate_note(BODY, "2026-02-26T18:04", 2)
        assert block.index == 2

    def test_out_of_range_index_falls_back_to_timestamp(self):
        block = locate_note(BODY, "2026-02-27T09:22", 7)
        assert block.index == 1

    def test_unknown_timestamp_raises(self):
        with pytest.raises(NoteNotFoundError, match="Note not found: 2020-01-01T00:00"):
            locate_note(BODY, "2020-01-01T00:00")

    def test_out_of_range_index_with_unknown_timestamp_raises(self):
        with pytest.raises(NoteNotFoundError):
            locate_note(BODY, "2020-01-01T00:00", 99)

    def test_not_found_is_a_lookup_error(self):
        with pytest.raises(LookupError):
            locate_note("", "2026-01-01T00:00", 0)


def test_split_tags_drops_empty_entries():
    assert split_tags("a, , b ,") == ["a", "b"]


def test_aggregate_tags_is_sorted_union():
    assert aggregate_tags(parse_notes(BODY)) == ["agentic-coding", "productivity"]
