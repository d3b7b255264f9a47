"""
Record parser tests
===================

These tests verify that:
- Only lines containing ':**' become fields, split at the first delimiter.
- Labels and values are cleaned of '**' markers and underscores.
- Extraction Date and Source URL are always the last two fields.
"""
import os
import sys
import unittest
from datetime import datetime

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
sys.path.insert(0, os.path.join(PROJECT_ROOT, 'src'))

from parsing.record_parser import (  # noqa: E402
    RecordParser,
    clean_field_label,
    clean_field_value,
    parse_record,
)

FIXED_NOW = datetime(2024, 5, 1, 14, 30, 5)


def make_parser():
    return RecordParser(clock=lambda: FIXED_NOW)


class TestCleaning(unittest.TestCase):
    def test_label_strips_markers_and_underscore(self):
        self.assertEqual(clean_field_label("**City_Name**"), "City Name")

    def test_label_replaces_every_underscore(self):
        self.assertEqual(clean_field_label("**Date_Of_Death"), "Date Of Death")

    def test_value_strips_markers_and_whitespace(self):
        self.assertEqual(clean_field_value("  **Springfield** "), "Springfield")


class TestRecordParser(unittest.TestCase):
    def test_simple_fields_in_order(self):
        record = make_parser().parse("Name:**Jane\nAge:**30", "http://x")

        self.assertEqual(
            list(record.keys()),
            ["Name", "Age", "Extraction Date", "Source URL"],
        )
        self.assertEqual(record["Name"], "Jane")
        self.assertEqual(record["Age"], "30")
        self.assertEqual(record["Extraction Date"], "05/01/2024, 02:30:05 PM")
        self.assertEqual(record["Source URL"], "http://x")

    def test_empty_input_has_only_derived_fields(self):
        record = make_parser().parse("", "http://x")

        self.assertEqual(list(record.keys()), ["Extraction Date", "Source URL"])
        self.assertEqual(record["Source URL"], "http://x")

    def test_non_significant_lines_ignored(self):
        raw = "\n".join([
            "Here is the extracted data:",
            "",
            "**Victim_Name:** John Doe",
            "- a bullet without delimiter",
            "**Agency:** City Police",
            "Note: single colon only",
        ])
        record = make_parser().parse(raw, "http://x")

        self.assertEqual(
            list(record.keys()),
            ["Victim Name", "Agency", "Extraction Date", "Source URL"],
        )
        self.assertEqual(record["Victim Name"], "John Doe")
        self.assertEqual(record["Agency"], "City Police")

    def test_split_at_first_delimiter_only(self):
        record = make_parser().parse("Quote:**He said:**hello", "http://x")
        self.assertEqual(record["Quote"], "He said:hello")

    def test_repeated_label_overwrites_in_place(self):
        raw = "A:**1\nB:**2\nA:**3"
        record = make_parser().parse(raw, "http://x")

        self.assertEqual(list(record.keys())[:2], ["A", "B"])
        self.assertEqual(record["A"], "3")

    def test_derived_fields_forced_to_end(self):
        raw = "Source URL:**http://other\nName:**Jane\nExtraction Date:**yesterday"
        record = make_parser().parse(raw, "http://x")

        self.assertEqual(
            list(record.keys()),
            ["Name", "Extraction Date", "Source URL"],
        )
        self.assertEqual(record["Source URL"], "http://x")
        self.assertEqual(record["Extraction Date"], "05/01/2024, 02:30:05 PM")

    def test_malformed_line_gives_empty_strings(self):
        record = make_parser().parse("   :**   ", "http://x")
        self.assertEqual(record[""], "")
        self.assertEqual(len(record), 3)

    def test_windows_line_endings(self):
        record = make_parser().parse("Name:**Jane\r\nAge:**30\r\n", "http://x")
        self.assertEqual(record["Name"], "Jane")
        self.assertEqual(record["Age"], "30")

    def test_every_significant_line_yields_one_field(self):
        lines = [f"Field_{i}:**value {i}" for i in range(10)]
        lines.insert(3, "noise")
        record = make_parser().parse("\n".join(lines), "http://x")
        self.assertEqual(len(record), 10 + 2)

    def test_module_shortcut_uses_current_time(self):
        record = parse_record("Name:**Jane", "http://x")
        self.assertIn("Extraction Date", record)
        self.assertTrue(record["Extraction Date"])


if __name__ == "__main__":
    unittest.main()
