import unittest
from datetime import date, datetime, timezone

from source_notes.constants import POST_FIELDS, SOURCE_FIELDS
from source_notes.core.frontmatter_operations import (
    decode_document,
    encode_document,
    fields_for,
    format_instant,
    yaml_scalar,
)
from source_notes.errors import MalformedDocumentError


SOURCE_DOCUMENT = (
    "---\n"
    "title: Deep Work\n"
    "author: Cal Newport\n"
    "type: book\n"
    "link: 'https://calnewport.com/deep-work'\n"
    "date: 2024-01-05T00:00:00.000Z\n"
    "tags:\n"
    "  - focus\n"
    "  - productivity\n"
    "---\n"
    "\n"
    "<!-- note: 2024-01-05T10:00 -->\n"
    "<!-- published: false -->\n"
    "Attention residue is real.\n"
)


class DecodeDocumentTests(unittest.TestCase):
    def test_decode_returns_metadata_and_exact_body(self) -> None:
        metadata, body = decode_document(SOURCE_DOCUMENT)
        self.assertEqual(metadata["title"], "Deep Work")
        self.assertEqual(metadata["author"], "Cal Newport")
        self.assertEqual(metadata["link"], "https://calnewport.com/deep-work")
        self.assertEqual(metadata["tags"], ["focus", "productivity"])
        self.assertIsInstance(metadata["date"], datetime)
        self.assertEqual(
            body,
            "\n<!-- note: 2024-01-05T10:00 -->\n<!-- published: false -->\nAttention residue is real.\n",
        )

    def test_decode_keeps_body_without_trailing_newline(self) -> None:
        _, body = decode_document("---\ntitle: X\n---\nNo newline at end")
        self.assertEqual(body, "No newline at end")

    def test_decode_accepts_empty_frontmatter(self) -> None:
        metadata, body = decode_document("---\n---\nBody\n")
        self.assertEqual(metadata, {})
        self.assertEqual(body, "Body\n")

    def test_decode_rejects_missing_frontmatter(self) -> None:
        with self.assertRaises(MalformedDocumentError):
            decode_document("Just a body, no frontmatter.\n")

    def test_decode_rejects_unterminated_frontmatter(self) -> None:
        with self.assertRaises(MalformedDocumentError):
            decode_document("---\ntitle: Never closed\nBody text\n")

    def test_decode_rejects_invalid_yaml(self) -> None:
        with self.assertRaises(MalformedDocumentError):
            decode_document("---\ntitle: [unclosed\n---\nBody\n")

    def test_malformed_document_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            decode_document("")


class EncodeDocumentTests(unittest.TestCase):
    def test_round_trip_preserves_document(self) -> None:
        metadata, body = decode_document(SOURCE_DOCUMENT)
        self.assertEqual(encode_document(metadata, body), SOURCE_DOCUMENT)

    def test_title_with_colon_and_quotes_round_trips(self) -> None:
        title = 'Title: "Quoted" Thing\'s'
        encoded = encode_document({"title": title, "author": "Someone"}, "\nBody\n")
        self.assertIn("title: 'Title: \"Quoted\" Thing''s'\n", encoded)

        metadata, body = decode_document(encoded)
        self.assertEqual(metadata["title"], title)
        self.assertEqual(body, "\nBody\n")

    def test_yaml_lookalike_strings_round_trip(self) -> None:
        for value in ("- x", "- a list-looking title", "null", "123", "true", "yes", " padded ", "? key", "~"):
            with self.subTest(value=value):
                encoded = encode_document({"title": value, "author": "null"}, "\nbody\n")
                metadata, body = decode_document(encoded)
                self.assertEqual(metadata["title"], value)
                self.assertEqual(metadata["author"], "null")
                self.assertEqual(body, "\nbody\n")

    def test_non_date_string_under_date_is_quoted(self) -> None:
        encoded = encode_document({"title": "T", "date": "- soon"}, "")
        self.assertIn("date: '- soon'\n", encoded)
        metadata, _ = decode_document(encoded)
        self.assertEqual(metadata["date"], "- soon")

    def test_fields_are_emitted_in_schema_order(self) -> None:
        encoded = encode_document(
            {"tags": ["b"], "type": "article", "title": "T", "author": "A"},
            "",
        )
        self.assertEqual(
            encoded,
            "---\ntitle: T\nauthor: A\ntype: article\ntags:\n  - b\n---\n",
        )

    def test_unrecognized_keys_are_dropped(self) -> None:
        encoded = encode_document({"title": "T", "rating": 5, "custom": "x"}, "")
        self.assertNotIn("rating", encoded)
        self.assertNotIn("custom", encoded)

    def test_empty_tags_are_omitted(self) -> None:
        encoded = encode_document({"title": "T", "tags": []}, "")
        self.assertNotIn("tags", encoded)

    def test_archived_only_written_when_true(self) -> None:
        self.assertIn("archived: true\n", encode_document({"title": "T", "archived": True}, ""))
        self.assertNotIn("archived", encode_document({"title": "T", "archived": False}, ""))

    def test_date_string_is_kept_as_given(self) -> None:
        encoded = encode_document({"title": "T", "date": "2026-02-26"}, "")
        self.assertIn("date: 2026-02-26\n", encoded)

    def test_post_fields_include_draft_flag(self) -> None:
        encoded = encode_document(
            {"title": "An Essay", "draft": False, "description": "Short"},
            "Text\n",
            POST_FIELDS,
        )
        self.assertEqual(encoded, "---\ntitle: An Essay\ndescription: Short\ndraft: false\n---\nText\n")


class FrontmatterHelperTests(unittest.TestCase):
    def test_yaml_scalar_plain_and_quoted(self) -> None:
        self.assertEqual(yaml_scalar("Plain title"), "Plain title")
        self.assertEqual(yaml_scalar("It's #1"), "'It''s #1'")
        self.assertEqual(yaml_scalar(""), "''")
        self.assertEqual(yaml_scalar("null"), "'null'")
        self.assertEqual(yaml_scalar("123"), "'123'")
        self.assertEqual(yaml_scalar("- x"), "'- x'")
        self.assertEqual(yaml_scalar(" padded "), "' padded '")

    def test_format_instant_for_date_and_datetime(self) -> None:
        self.assertEqual(format_instant(date(2025, 10, 27)), "2025-10-27T00:00:00.000Z")
        self.assertEqual(
            format_instant(datetime(2025, 10, 27, 12, 30, 5, 250000, tzinfo=timezone.utc)),
            "2025-10-27T12:30:05.250Z",
        )

    def test_format_instant_treats_naive_datetime_as_utc(self) -> None:
        self.assertEqual(format_instant(datetime(2025, 1, 1, 12, 0)), "2025-01-01T12:00:00.000Z")

    def test_fields_for_known_and_unknown_collections(self) -> None:
        self.assertEqual(fields_for("sources"), SOURCE_FIELDS)
        self.assertEqual(fields_for("posts"), POST_FIELDS)
        with self.assertRaises(ValueError):
            fields_for("drafts")


if __name__ == "__main__":
    unittest.main()
