"""Data models for irrigation-app store entities.

Provides the Section dataclass with serialization to/from the realtime
database record layout, and the fixed pipe and weekday vocabularies.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from irrigation_manager.app.errors import ValidationError

# Weekday labels in display order (Monday first)
WEEKDAYS: tuple[str, ...] = ("pn", "wt", "śr", "cz", "pt", "sb", "nd")

DAYS_SEPARATOR = ", "


class WateringType(str, Enum):
    """Pipe diameters a section can be watered through."""

    PIPE_16MM = "Rura 16mm"
    PIPE_25MM = "Rura 25mm"
    PIPE_32MM = "Rura 32mm"

    @property
    def diameter(self) -> str:
        """Bare diameter label, e.g. "16mm"."""
        return self.value.split()[-1]

    @classmethod
    def parse(cls, text: str) -> "WateringType":
        """Parse a pipe label.

        Accepts the full label ("Rura 16mm"), the diameter ("16mm")
        or the bare number ("16"), case-insensitively.

        Args:
            text: Label to parse

        Returns:
            Matching WateringType

        Raises:
            ValidationError: If the label matches no known pipe
        """
        normalized = text.strip().lower()
        for member in cls:
            candidates = {
                member.value.lower(),
                member.diameter.lower(),
                member.diameter.lower().removesuffix("mm"),
            }
            if normalized in candidates:
                return member
        allowed = ", ".join(member.diameter for member in cls)
        raise ValidationError("watering_type", f"Unknown pipe type '{text}' (expected one of: {allowed})")


def parse_duration(text: str) -> int:
    """Parse a watering duration in minutes.

    Raises:
        ValidationError: If the value is not a non-negative integer
    """
    try:
        minutes = int(text.strip())
    except ValueError:
        raise ValidationError("duration", f"Duration must be a whole number of minutes, got '{text}'")
    if minutes < 0:
        raise ValidationError("duration", "Duration cannot be negative")
    return minutes


def parse_start_time(text: str) -> str:
    """Validate an HH:mm start time and return it normalized (zero-padded).

    Raises:
        ValidationError: If the value is not a valid 24-hour time
    """
    try:
        parsed = datetime.strptime(text.strip(), "%H:%M")
    except ValueError:
        raise ValidationError("start_time", f"Start time must be HH:mm, got '{text}'")
    return parsed.strftime("%H:%M")


def parse_days(text: str) -> str:
    """Validate a comma-separated list of weekday labels.

    The labels are kept in the order they were written.

    Raises:
        ValidationError: If any label is not a known weekday
    """
    days = [part.strip() for part in text.split(",") if part.strip()]
    unknown = [day for day in days if day not in WEEKDAYS]
    if unknown:
        raise ValidationError(
            "selected_days",
            f"Unknown day(s): {', '.join(unknown)} (expected: {', '.join(WEEKDAYS)})",
        )
    return DAYS_SEPARATOR.join(days)


@dataclass
class Section:
    """An irrigation zone with a schedule and a live elapsed-time counter.

    Attributes:
        id: Unique section ID, generated client-side
        name: Display name
        start_time: Daily start time (HH:mm)
        duration_minutes: Watering duration in minutes
        selected_days: Comma-joined weekday labels (e.g. "pn, śr")
        watering_type: Pipe label (normally a WateringType value)
        elapsed_seconds: Accumulated manual running time
    """

    id: str
    name: str
    start_time: str
    duration_minutes: int
    selected_days: str = ""
    watering_type: str = WateringType.PIPE_16MM.value
    elapsed_seconds: int = 0

    @classmethod
    def generate_id(cls) -> str:
        """Generate a new unique section ID.

        Returns:
            Unique ID string
        """
        return str(uuid.uuid4())

    @property
    def days(self) -> list[str]:
        """Selected weekday labels as a list."""
        return [day.strip() for day in self.selected_days.split(",") if day.strip()]

    @property
    def formatted_elapsed(self) -> str:
        """Elapsed time formatted as MM:SS (or H:MM:SS past an hour)."""
        hours, remainder = divmod(self.elapsed_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"

    @classmethod
    def from_record(cls, record: dict[str, Any], section_id: Optional[str] = None) -> "Section":
        """Create a Section from a stored record.

        Args:
            record: Record dictionary as kept in the realtime database
            section_id: Key the record is stored under, used when the
                record itself has no Id field

        Returns:
            Section instance
        """
        return cls(
            id=record.get("Id") or section_id or "",
            name=record.get("Name") or "",
            start_time=record.get("StartTime") or "",
            duration_minutes=int(record.get("Duration") or 0),
            selected_days=record.get("SelectedDays") or "",
            watering_type=record.get("WateringType") or "",
            elapsed_seconds=int(record.get("ElapsedTime") or 0),
        )

    def to_record(self) -> dict[str, Any]:
        """Convert Section to its stored record layout.

        Returns:
            Dictionary representation of the section
        """
        return {
            "Id": self.id,
            "Name": self.name,
            "StartTime": self.start_time,
            "Duration": self.duration_minutes,
            "SelectedDays": self.selected_days,
            "ElapsedTime": self.elapsed_seconds,
            "WateringType": self.watering_type,
        }
