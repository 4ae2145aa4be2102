"""Weekday selection used while composing a section."""

from irrigation_manager.app.db.models import DAYS_SEPARATOR, WEEKDAYS
from irrigation_manager.app.errors import ValidationError

SELECTED_COLOR = "Teal"
UNSELECTED_COLOR = "LightGray"


class DaySelector:
    """Toggle set over the seven weekday labels.

    Selection order is insertion order; it is the order the days are
    written in when the section is saved.
    """

    def __init__(self) -> None:
        self._selected: list[str] = []

    def _check(self, day: str) -> None:
        if day not in WEEKDAYS:
            raise ValidationError("selected_days", f"Unknown day '{day}'")

    def toggle(self, day: str) -> bool:
        """Flip the selection of a day.

        Returns:
            True if the day is selected after the call
        """
        self._check(day)
        if day in self._selected:
            self._selected.remove(day)
            return False
        self._selected.append(day)
        return True

    def reset(self) -> None:
        """Deselect every day."""
        self._selected.clear()

    def is_selected(self, day: str) -> bool:
        self._check(day)
        return day in self._selected

    @property
    def selected(self) -> tuple[str, ...]:
        """Selected days in the order they were picked."""
        return tuple(self._selected)

    @property
    def colors(self) -> dict[str, str]:
        """Display color for each weekday, in week order."""
        return {
            day: SELECTED_COLOR if day in self._selected else UNSELECTED_COLOR
            for day in WEEKDAYS
        }

    def joined(self) -> str:
        """Selected days as stored on a section, e.g. "pn, śr"."""
        return DAYS_SEPARATOR.join(self._selected)
