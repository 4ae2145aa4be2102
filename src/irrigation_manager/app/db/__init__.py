"""Store layer for irrigation-app.

Provides the Section model, the realtime database client and an
in-memory store with the same interface.
"""

from irrigation_manager.app.db.memory_store import MemorySectionStore
from irrigation_manager.app.db.models import Section, WateringType
from irrigation_manager.app.db.store_client import RealtimeStoreClient, SectionStore

__all__ = ["MemorySectionStore", "RealtimeStoreClient", "Section", "SectionStore", "WateringType"]
