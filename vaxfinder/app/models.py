"""Data models for Healthpoint directory entries."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from vaxfinder.app.errors import DirectoryParseError

LOGGER = logging.getLogger(__name__)


class Instruction(str, Enum):
    """Access instructions published for a clinic, keyed by their directory text."""

    ANYONE_ELIGIBLE = "Anyone currently eligible can access"
    MAKE_APPOINTMENT = "Make an appointment"
    ENROLLED_ONLY = "Eligible GP enrolled patients only"
    WALK_IN = "Walk in"
    INVITATION_ONLY = "By invitation only"
    DRIVE_THROUGH = "Drive through"
    ALLOWS_BOOKINGS = "Allows bookings"


@dataclass
class OpeningHours:
    """Structured opening hours for a clinic."""

    schedule: dict[str, str] = field(default_factory=dict)
    exceptions: dict[str, str] = field(default_factory=dict)
    notes_html: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any) -> "OpeningHours":
        if payload is None:
            return cls()
        if not isinstance(payload, dict):
            raise DirectoryParseError("Opening hours must be an object.")
        return cls(
            schedule=_str_mapping(payload.get("schedule"), "schedule"),
            exceptions=_str_mapping(payload.get("exceptions"), "exceptions"),
            notes_html=_str_list(payload.get("notesHtml"), "notesHtml"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedule": dict(self.schedule),
            "exceptions": dict(self.exceptions),
            "notesHtml": list(self.notes_html),
        }


# attribute name -> directory key
_WIRE_KEYS: dict[str, str] = {
    "lat": "lat",
    "lng": "lng",
    "name": "name",
    "branch": "branch",
    "is_open_today": "isOpenToday",
    "open_today_hours": "openTodayHours",
    "url": "url",
    "instructions": "instructionLis",
    "address": "address",
    "fax_number": "faxNumber",
    "telephone": "telephone",
    "opening_hours": "opennningHours",
}


@dataclass
class RawLocationEntry:
    """A clinic record exactly as listed in the Healthpoint directory."""

    lat: float
    lng: float
    name: str
    branch: str = ""
    is_open_today: bool = False
    open_today_hours: str = ""
    url: str = ""
    instructions: list[Instruction] = field(default_factory=list)
    address: str = ""
    fax_number: str = ""
    telephone: str = ""
    opening_hours: OpeningHours = field(default_factory=OpeningHours)

    @classmethod
    def from_dict(cls, payload: Any) -> "RawLocationEntry":
        """Build an entry from one element of the directory JSON array."""

        if not isinstance(payload, dict):
            raise DirectoryParseError("Directory entries must be JSON objects.")

        lat = _coordinate(payload, "lat")
        lng = _coordinate(payload, "lng")

        name = payload.get("name")
        if not isinstance(name, str):
            raise DirectoryParseError("Directory entry 'name' must be a string.")

        is_open_today = payload.get("isOpenToday", False)
        if not isinstance(is_open_today, bool):
            raise DirectoryParseError(f"'isOpenToday' for {name!r} must be a boolean.")

        return cls(
            lat=lat,
            lng=lng,
            name=name,
            branch=_text(payload, "branch"),
            is_open_today=is_open_today,
            open_today_hours=_text(payload, "openTodayHours"),
            url=_text(payload, "url"),
            instructions=_parse_instructions(payload.get("instructionLis"), name),
            address=_text(payload, "address"),
            fax_number=_text(payload, "faxNumber"),
            telephone=_text(payload, "telephone"),
            opening_hours=OpeningHours.from_dict(payload.get("opennningHours")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for attribute, key in _WIRE_KEYS.items():
            data[key] = getattr(self, attribute)
        data["instructionLis"] = [instruction.value for instruction in self.instructions]
        data["opennningHours"] = self.opening_hours.to_dict()
        return data


@dataclass
class HealthpointLocation(RawLocationEntry):
    """A directory entry tagged as coming from Healthpoint.

    ``is_healthpoint`` is fixed to ``True`` and lets consumers tell these
    records apart from booking locations merged in from other sources.
    """

    is_healthpoint: bool = field(default=True, init=False)

    def untag(self) -> RawLocationEntry:
        """Return the underlying directory entry without the source marker."""

        return RawLocationEntry(**_field_values(self))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"isHealthpoint": True}
        data.update(super().to_dict())
        return data


def tag_location(raw: RawLocationEntry) -> HealthpointLocation:
    """Attach the Healthpoint source marker to a raw directory entry."""

    return HealthpointLocation(**_field_values(raw))


def _field_values(entry: RawLocationEntry) -> dict[str, Any]:
    return {
        item.name: copy.deepcopy(getattr(entry, item.name))
        for item in fields(RawLocationEntry)
    }


def _parse_instructions(values: Any, name: str) -> list[Instruction]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise DirectoryParseError(f"'instructionLis' for {name!r} must be an array.")

    instructions: list[Instruction] = []
    for value in values:
        try:
            instructions.append(Instruction(value))
        except ValueError:
            LOGGER.debug("Skipping unknown instruction for %s: %r", name, value)
    return instructions


def _str_mapping(value: Any, label: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DirectoryParseError(f"Opening hours '{label}' must be an object.")
    if not all(isinstance(item, str) for item in value.values()):
        raise DirectoryParseError(f"Opening hours '{label}' values must be strings.")
    return {str(key): item for key, item in value.items()}


def _str_list(value: Any, label: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise DirectoryParseError(f"Opening hours '{label}' must be an array of strings.")
    return list(value)


def _coordinate(payload: dict[str, Any], key: str) -> float:
    if key not in payload:
        raise DirectoryParseError(f"Directory entry is missing {key!r}.")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DirectoryParseError(f"Directory coordinate {key!r} must be a number.")
    return float(value)


def _text(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DirectoryParseError(f"Directory entry {key!r} must be a string.")
    return value
