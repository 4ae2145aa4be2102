"""In-memory section store.

Keeps section records in a nested dict keyed by user id and section id.
Used by ``irrigation-app run --offline`` and by the test suite.
"""

from typing import Any, Optional

from irrigation_manager.app.db.models import Section
from irrigation_manager.app.errors import StoreError
from irrigation_manager.app.logging_config import get_logger

logger = get_logger(__name__)


class MemorySectionStore:
    """Section store backed by process memory.

    Records are stored in the same layout as the realtime database, so a
    section read back is always a fresh object.
    """

    def __init__(self, data: Optional[dict[str, dict[str, dict[str, Any]]]] = None):
        self._data: dict[str, dict[str, dict[str, Any]]] = data if data is not None else {}
        self.closed = False

    def _user(self, user_id: str) -> dict[str, dict[str, Any]]:
        if self.closed:
            raise StoreError("Store is closed")
        return self._data.setdefault(user_id, {})

    async def list_sections(self, user_id: str) -> list[Section]:
        sections = []
        for key, record in self._user(user_id).items():
            try:
                sections.append(Section.from_record(record, section_id=key))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed section record under key {key!r}: {e}")
        return sections

    async def upsert_section(self, user_id: str, section: Section) -> None:
        self._user(user_id)[section.id] = section.to_record()

    async def delete_section(self, user_id: str, section_id: str) -> None:
        self._user(user_id).pop(section_id, None)

    async def update_elapsed_time(self, user_id: str, section_id: str, elapsed_seconds: int) -> None:
        record = self._user(user_id).get(section_id)
        if record is None:
            # A write racing a delete must not bring back a nameless record
            logger.debug(f"Ignoring elapsed time for missing section {section_id}")
            return
        record["ElapsedTime"] = elapsed_seconds

    def get_record(self, user_id: str, section_id: str) -> Optional[dict[str, Any]]:
        """Return the raw stored record, or None."""
        return self._data.get(user_id, {}).get(section_id)

    async def close(self) -> None:
        self.closed = True
