"""Tests for parsing and tagging Healthpoint directory entries."""
from __future__ import annotations

from typing import Any
import unittest

from vaxfinder.app.errors import DirectoryParseError
from vaxfinder.app.models import (
    HealthpointLocation,
    Instruction,
    OpeningHours,
    RawLocationEntry,
    tag_location,
)


def _payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "lat": -36.8485,
        "lng": 174.7633,
        "name": "Queen Street Pharmacy",
        "branch": "pharmacy",
        "isOpenToday": True,
        "openTodayHours": "8:30 am - 5:00 pm",
        "url": "https://www.healthpoint.co.nz/pharmacy/queen-street/",
        "instructionLis": ["Walk in", "Anyone currently eligible can access"],
        "address": "12 Queen Street, Auckland Central, Auckland 1010",
        "faxNumber": "(09) 555 0101",
        "telephone": "(09) 555 0100",
        "opennningHours": {
            "schedule": {"Monday 1 November": "8:30 am - 5:00 pm"},
            "exceptions": {"Labour Day": "Closed"},
            "notesHtml": ["<p>Pfizer vaccine available.</p>"],
        },
    }
    payload.update(overrides)
    return payload


class RawLocationEntryTestCase(unittest.TestCase):
    """Validate conversion from the directory JSON format."""

    def test_from_dict_reads_every_field(self) -> None:
        """Wire keys, including the directory's own spellings, map onto attributes."""

        entry = RawLocationEntry.from_dict(_payload())

        self.assertEqual(entry.name, "Queen Street Pharmacy")
        self.assertAlmostEqual(entry.lat, -36.8485)
        self.assertTrue(entry.is_open_today)
        self.assertEqual(entry.fax_number, "(09) 555 0101")
        self.assertEqual(
            entry.instructions,
            [Instruction.WALK_IN, Instruction.ANYONE_ELIGIBLE],
        )
        self.assertEqual(entry.opening_hours.exceptions, {"Labour Day": "Closed"})
        self.assertEqual(entry.opening_hours.notes_html, ["<p>Pfizer vaccine available.</p>"])

    def test_to_dict_restores_directory_format(self) -> None:
        payload = _payload()
        self.assertEqual(RawLocationEntry.from_dict(payload).to_dict(), payload)

    def test_unknown_instructions_are_skipped(self) -> None:
        """Instruction texts outside the known set are dropped."""

        entry = RawLocationEntry.from_dict(
            _payload(instructionLis=["Walk in", "Bring your own snacks"])
        )
        self.assertEqual(entry.instructions, [Instruction.WALK_IN])

    def test_missing_optional_fields_default(self) -> None:
        entry = RawLocationEntry.from_dict({"lat": 1, "lng": 2, "name": "Clinic"})

        self.assertFalse(entry.is_open_today)
        self.assertEqual(entry.instructions, [])
        self.assertEqual(entry.opening_hours, OpeningHours())

    def test_malformed_entries_raise_parse_error(self) -> None:
        bad_payloads = [
            "not an object",
            _payload(lat="north"),
            {"lng": 2, "name": "No latitude"},
            _payload(name=None),
            _payload(isOpenToday="yes"),
            _payload(instructionLis="Walk in"),
            _payload(opennningHours=["Monday"]),
            _payload(lat="12.5"),
            _payload(lat=True),
            _payload(branch=5),
            _payload(url=["https://www.healthpoint.co.nz/"]),
            _payload(telephone={"number": "(09) 555 0100"}),
            _payload(opennningHours={"notesHtml": 5}),
            _payload(opennningHours={"notesHtml": "<p>Closed</p>"}),
            _payload(opennningHours={"schedule": {"Monday 1 November": 830}}),
        ]
        for payload in bad_payloads:
            with self.subTest(payload=payload):
                with self.assertRaises(DirectoryParseError):
                    RawLocationEntry.from_dict(payload)


class TaggingTestCase(unittest.TestCase):
    """Validate the Healthpoint source marker."""

    def test_tag_location_marks_source(self) -> None:
        location = tag_location(RawLocationEntry.from_dict(_payload()))

        self.assertIsInstance(location, HealthpointLocation)
        self.assertIs(location.is_healthpoint, True)
        self.assertEqual(location.to_dict()["isHealthpoint"], True)

    def test_untag_returns_original_entry(self) -> None:
        """Tagging then untagging gives back an equal entry."""

        raw = RawLocationEntry.from_dict(_payload())
        untagged = tag_location(raw).untag()

        self.assertIs(type(untagged), RawLocationEntry)
        self.assertEqual(untagged, raw)

    def test_tagged_dict_only_adds_marker(self) -> None:
        payload = _payload()
        tagged = tag_location(RawLocationEntry.from_dict(payload)).to_dict()

        self.assertEqual(set(tagged) - set(payload), {"isHealthpoint"})

    def test_tagging_copies_mutable_fields(self) -> None:
        """Changing a tagged record leaves the raw entry untouched, and back."""

        raw = RawLocationEntry.from_dict(_payload())
        tagged = tag_location(raw)
        tagged.instructions.append(Instruction.DRIVE_THROUGH)
        tagged.opening_hours.notes_html.clear()

        self.assertEqual(
            raw.instructions,
            [Instruction.WALK_IN, Instruction.ANYONE_ELIGIBLE],
        )
        self.assertEqual(raw.opening_hours.notes_html, ["<p>Pfizer vaccine available.</p>"])

        untagged = tagged.untag()
        untagged.instructions.clear()
        self.assertEqual(len(tagged.instructions), 3)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
