"""Shared fixtures for app tests."""

from typing import Optional

import pytest

from irrigation_manager.app.db.memory_store import MemorySectionStore
from irrigation_manager.app.db.models import Section
from irrigation_manager.app.errors import StoreError
from irrigation_manager.app.state import SectionList

USER_ID = "user-1"


class FakeInteraction:
    """UserInteraction that answers from canned values and records notices."""

    def __init__(self, confirm_answer: bool = True, prompt_answers: Optional[list] = None):
        self.confirm_answer = confirm_answer
        self.prompt_answers = list(prompt_answers or [])
        self.confirmations: list[tuple[str, str]] = []
        self.prompts: list[tuple[str, str, str]] = []
        self.notices: list[tuple[str, str]] = []

    async def confirm(self, title: str, message: str) -> bool:
        self.confirmations.append((title, message))
        return self.confirm_answer

    async def prompt_text(self, title: str, message: str, initial_value: str = "") -> Optional[str]:
        self.prompts.append((title, message, initial_value))
        if not self.prompt_answers:
            return None
        return self.prompt_answers.pop(0)

    def notify(self, title: str, message: str) -> None:
        self.notices.append((title, message))


class RecordingStore(MemorySectionStore):
    """Memory store that records every call and can be told to fail."""

    def __init__(self):
        super().__init__()
        self.calls: list[tuple] = []
        self.fail = False

    def _maybe_fail(self) -> None:
        if self.fail:
            raise StoreError("store unavailable", status_code=503)

    async def list_sections(self, user_id):
        self.calls.append(("list", user_id))
        self._maybe_fail()
        return await super().list_sections(user_id)

    async def upsert_section(self, user_id, section):
        self.calls.append(("upsert", user_id, section.id))
        self._maybe_fail()
        await super().upsert_section(user_id, section)

    async def delete_section(self, user_id, section_id):
        self.calls.append(("delete", user_id, section_id))
        self._maybe_fail()
        await super().delete_section(user_id, section_id)

    async def update_elapsed_time(self, user_id, section_id, elapsed_seconds):
        self.calls.append(("elapsed", user_id, section_id, elapsed_seconds))
        self._maybe_fail()
        await super().update_elapsed_time(user_id, section_id, elapsed_seconds)

    def writes(self) -> list[tuple]:
        """Calls other than reads."""
        return [call for call in self.calls if call[0] != "list"]


class ManualTrigger:
    """Trigger that only fires when a test tells it to."""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.stopped = False

    async def fire(self) -> None:
        await self.callback()

    def stop(self) -> None:
        self.stopped = True


class ManualTriggerFactory:
    """Creates ManualTriggers and remembers all of them."""

    def __init__(self):
        self.created: list[ManualTrigger] = []

    def __call__(self, interval, callback) -> ManualTrigger:
        trigger = ManualTrigger(interval, callback)
        self.created.append(trigger)
        return trigger

    @property
    def last(self) -> ManualTrigger:
        return self.created[-1]


def make_section(section_id: str = "s1", name: str = "Front Lawn", elapsed: int = 0) -> Section:
    return Section(
        id=section_id,
        name=name,
        start_time="06:00",
        duration_minutes=15,
        selected_days="pn, śr",
        watering_type="Rura 16mm",
        elapsed_seconds=elapsed,
    )


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def sections():
    return SectionList()


@pytest.fixture
def interaction():
    return FakeInteraction()


@pytest.fixture
def trigger_factory():
    return ManualTriggerFactory()


@pytest.fixture
def sample_record():
    """Sample stored record as written by existing clients."""
    return {
        "Id": "s1",
        "Name": "Front Lawn",
        "StartTime": "06:00",
        "Duration": 15,
        "SelectedDays": "pn, śr",
        "ElapsedTime": 42,
        "WateringType": "Rura 16mm",
    }


@pytest.fixture
def section_factory():
    """Factory building sample sections: section_factory("s1", elapsed=3)."""
    return make_section
