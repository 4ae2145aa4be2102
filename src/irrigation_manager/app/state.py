"""Application state for irrigation-app.

Manages observable state for the TUI. The section list is the one piece of
state shared between user commands and the manual timers, so every write to
it goes through SectionList, which applies it under a lock and then tells
listeners what changed.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterator, Optional

from irrigation_manager.app.db.models import Section
from irrigation_manager.app.logging_config import get_logger

logger = get_logger(__name__)


class AppScreen(Enum):
    """Available screens in the app."""

    SECTIONS = auto()
    MANUAL_CONTROL = auto()


class ChangeKind(Enum):
    """Kinds of section list changes."""

    RESET = "reset"
    APPEND = "append"
    REPLACE = "replace"
    REMOVE = "remove"


@dataclass(frozen=True)
class SectionListChange:
    """Description of one applied change to the section list.

    Attributes:
        kind: What happened
        index: Position affected (None for RESET)
        section: Section added, replaced in or removed (None for RESET)
    """

    kind: ChangeKind
    index: Optional[int] = None
    section: Optional[Section] = None


SectionListListener = Callable[[SectionListChange], None]


class SectionList:
    """Ordered, observable collection of a user's sections.

    Readers get immutable snapshots; writers replace whole Section objects
    so observers can react to identity changes.
    """

    def __init__(self) -> None:
        self._items: list[Section] = []
        self._lock = threading.RLock()
        self._listeners: list[SectionListListener] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[Section]:
        return iter(self.snapshot())

    def snapshot(self) -> tuple[Section, ...]:
        """Return the current sections as a tuple."""
        with self._lock:
            return tuple(self._items)

    @property
    def ids(self) -> list[str]:
        with self._lock:
            return [section.id for section in self._items]

    def get(self, section_id: str) -> Optional[Section]:
        """Find a section by id."""
        with self._lock:
            for section in self._items:
                if section.id == section_id:
                    return section
        return None

    def index_of(self, section_id: str) -> Optional[int]:
        with self._lock:
            for index, section in enumerate(self._items):
                if section.id == section_id:
                    return index
        return None

    def add_listener(self, callback: SectionListListener) -> None:
        """Register a callback invoked after every applied change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: SectionListListener) -> None:
        self._listeners = [cb for cb in self._listeners if cb != callback]

    def _notify(self, change: SectionListChange) -> None:
        for callback in list(self._listeners):
            try:
                callback(change)
            except Exception:
                logger.exception(f"Section list listener failed on {change.kind.value}")

    def reset(self, sections: list[Section]) -> None:
        """Replace the whole list, keeping the given order."""
        with self._lock:
            self._items = list(sections)
        self._notify(SectionListChange(ChangeKind.RESET))

    def append(self, section: Section) -> None:
        with self._lock:
            self._items.append(section)
            index = len(self._items) - 1
        self._notify(SectionListChange(ChangeKind.APPEND, index, section))

    def replace(self, section: Section) -> bool:
        """Put a new Section object in place of the one with the same id.

        Returns:
            True if a section with that id was found and replaced
        """
        with self._lock:
            index = self.index_of(section.id)
            if index is None:
                return False
            self._items[index] = section
        self._notify(SectionListChange(ChangeKind.REPLACE, index, section))
        return True

    def update(self, section_id: str, mutate: Callable[[Section], Section]) -> Optional[Section]:
        """Atomically read, transform and replace one section.

        Args:
            section_id: Section to update
            mutate: Function returning the replacement for the current section

        Returns:
            The replacement section, or None if the id is not in the list
        """
        with self._lock:
            index = self.index_of(section_id)
            if index is None:
                return None
            updated = mutate(self._items[index])
            self._items[index] = updated
        self._notify(SectionListChange(ChangeKind.REPLACE, index, updated))
        return updated

    def remove(self, section_id: str) -> Optional[Section]:
        """Remove a section by id.

        Returns:
            The removed section, or None if it was not present
        """
        with self._lock:
            index = self.index_of(section_id)
            if index is None:
                return None
            section = self._items.pop(index)
        self._notify(SectionListChange(ChangeKind.REMOVE, index, section))
        return section


@dataclass
class AppState:
    """Application state shared by the screens.

    Attributes:
        user_id: Owner of the displayed sections
        sections: Observable section list
        current_screen: Currently active screen
        previous_screen: Screen to return to (for back navigation)
        is_loading: Whether sections are being loaded
        error_message: Last error reported to the user
    """

    user_id: str = ""
    sections: SectionList = field(default_factory=SectionList)

    # Navigation
    current_screen: AppScreen = AppScreen.SECTIONS
    previous_screen: Optional[AppScreen] = None

    # UI state
    is_loading: bool = False
    error_message: Optional[str] = None

    _listeners: dict[str, list[Callable]] = field(default_factory=dict)

    def add_listener(self, property_name: str, callback: Callable) -> None:
        """Add a listener for a property change.

        Args:
            property_name: Name of the property to watch
            callback: Function to call when property changes
        """
        self._listeners.setdefault(property_name, []).append(callback)

    def remove_listener(self, property_name: str, callback: Callable) -> None:
        if property_name in self._listeners:
            self._listeners[property_name] = [
                cb for cb in self._listeners[property_name] if cb != callback
            ]

    def _notify(self, property_name: str, value) -> None:
        for callback in self._listeners.get(property_name, []):
            try:
                callback(value)
            except Exception:
                logger.exception(f"Listener for {property_name} failed")

    def navigate_to(self, screen: AppScreen) -> None:
        """Navigate to a screen, saving current for back navigation."""
        self.previous_screen = self.current_screen
        self.current_screen = screen
        self._notify("current_screen", screen)

    def navigate_back(self) -> bool:
        """Navigate back to the previous screen.

        Returns:
            True if navigation occurred
        """
        if self.previous_screen:
            self.current_screen = self.previous_screen
            self.previous_screen = None
            self._notify("current_screen", self.current_screen)
            return True
        return False

    def set_loading(self, loading: bool) -> None:
        self.is_loading = loading
        self._notify("is_loading", loading)

    def set_error(self, message: Optional[str]) -> None:
        """Set error message (None to clear)."""
        self.error_message = message
        self._notify("error_message", message)

    def clear_error(self) -> None:
        self.set_error(None)
