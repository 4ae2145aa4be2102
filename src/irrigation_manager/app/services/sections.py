"""Section list management.

Loads a user's sections from the store into the shared SectionList and
applies add, edit and delete commands to both. Every command writes to the
store first and only then changes the in-memory list, so a failed store
call leaves the list as it was.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from irrigation_manager.app.db.models import (
    Section,
    WateringType,
    parse_days,
    parse_duration,
    parse_start_time,
)
from irrigation_manager.app.db.store_client import SectionStore
from irrigation_manager.app.errors import ValidationError
from irrigation_manager.app.interaction import UserInteraction
from irrigation_manager.app.logging_config import get_logger
from irrigation_manager.app.services.day_selector import DaySelector
from irrigation_manager.app.state import SectionList

logger = get_logger(__name__)


@dataclass
class SectionDraft:
    """Values being composed for a new section.

    Attributes:
        name: Section name
        start_time: Start time text (HH:mm)
        duration: Duration text in minutes
        pipe: Pipe label
        days: Weekday selection
    """

    name: str = ""
    start_time: str = ""
    duration: str = ""
    pipe: str = ""
    days: DaySelector = field(default_factory=DaySelector)

    def clear(self) -> None:
        """Blank every field and deselect all days."""
        self.name = ""
        self.start_time = ""
        self.duration = ""
        self.pipe = ""
        self.days.reset()


def _require(value: Optional[str], field_name: str, label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(field_name, f"{label} is required")
    return value.strip()


class SectionListManager:
    """Keeps the in-memory section list in step with the store.

    Attributes:
        store: Section store
        sections: Shared observable section list
        interaction: Dialogs for confirmations and edit prompts
    """

    def __init__(self, store: SectionStore, sections: SectionList, interaction: UserInteraction):
        self.store = store
        self.sections = sections
        self.interaction = interaction

    async def load(self, user_id: str) -> bool:
        """Replace the list with the user's sections from the store.

        The store's order is kept as-is.

        Returns:
            False if no user is set, True once the list was replaced

        Raises:
            StoreError: If the sections cannot be fetched
        """
        if not user_id:
            logger.debug("load skipped: no user id")
            return False

        sections = await self.store.list_sections(user_id)
        self.sections.reset(sections)
        logger.info(f"Section list replaced with {len(sections)} section(s)")
        return True

    async def add(self, user_id: str, draft: SectionDraft) -> Section:
        """Create a section from a draft, persist it and append it.

        The draft is cleared after the section is stored.

        Returns:
            The new section

        Raises:
            ValidationError: If a required field is blank or malformed
            StoreError: If the section cannot be stored
        """
        name = _require(draft.name, "name", "Section name")
        start_time = parse_start_time(_require(draft.start_time, "start_time", "Start time"))
        duration = parse_duration(_require(draft.duration, "duration", "Duration"))
        pipe = WateringType.parse(_require(draft.pipe, "watering_type", "Pipe type"))

        section = Section(
            id=Section.generate_id(),
            name=name,
            start_time=start_time,
            duration_minutes=duration,
            selected_days=draft.days.joined(),
            watering_type=pipe.value,
        )
        # Ids are random, but a collision would silently overwrite a record
        while self.sections.get(section.id) is not None:
            section.id = Section.generate_id()

        await self.store.upsert_section(user_id, section)
        self.sections.append(section)
        draft.clear()
        logger.info(f"Added section {section.id} ({section.name})")
        return section

    async def delete(self, user_id: str, section_id: str) -> bool:
        """Delete a section after the user confirms.

        Returns:
            True if the section was deleted

        Raises:
            StoreError: If the store delete fails (the list is left unchanged)
        """
        section = self.sections.get(section_id)
        if section is None:
            logger.debug(f"delete ignored: unknown section {section_id}")
            return False

        confirmed = await self.interaction.confirm(
            "Delete section",
            f'Are you sure you want to delete section "{section.name}"?',
        )
        if not confirmed:
            logger.debug(f"delete of {section_id} cancelled by user")
            return False

        await self.store.delete_section(user_id, section_id)
        self.sections.remove(section_id)
        logger.info(f"Deleted section {section_id} ({section.name})")
        return True

    async def _prompt(self, title: str, message: str, initial_value: str) -> Optional[str]:
        value = await self.interaction.prompt_text(title, message, initial_value)
        if value is None or not value.strip():
            return None
        return value.strip()

    async def edit(self, user_id: str, section_id: str) -> bool:
        """Prompt for all five authored fields and save them together.

        Leaving any prompt blank (or cancelling it) abandons the edit with
        nothing written.

        Returns:
            True if the section was updated

        Raises:
            ValidationError: If a prompted value is malformed
            StoreError: If the store write fails (the list is left unchanged)
        """
        section = self.sections.get(section_id)
        if section is None:
            logger.debug(f"edit ignored: unknown section {section_id}")
            return False

        prompts = [
            ("Edit section", "Enter the new section name:", section.name),
            ("Edit start time", "Enter the new start time (HH:mm):", section.start_time),
            ("Edit duration", "Enter the new duration (minutes):", str(section.duration_minutes)),
            ("Edit days", "Enter the new weekdays separated by commas (e.g. pn, wt, śr):", section.selected_days),
            ("Edit pipe", "Enter the new pipe type (16mm, 25mm, 32mm):", section.watering_type),
        ]
        answers = []
        for title, message, initial in prompts:
            answer = await self._prompt(title, message, initial)
            if answer is None:
                logger.debug(f"edit of {section_id} abandoned at '{title}'")
                return False
            answers.append(answer)

        name, start_text, duration_text, days_text, pipe_text = answers
        fields = {
            "name": name,
            "start_time": parse_start_time(start_text),
            "duration_minutes": parse_duration(duration_text),
            "selected_days": parse_days(days_text),
            "watering_type": WateringType.parse(pipe_text).value,
        }

        # A timer may have ticked while the prompts were open
        current = self.sections.get(section_id)
        if current is None:
            logger.warning(f"Section {section_id} disappeared during edit")
            return False

        await self.store.upsert_section(user_id, replace(current, **fields))
        self.sections.update(section_id, lambda latest: replace(latest, **fields))
        logger.info(f"Edited section {section_id} ({name})")
        return True
