"""Async client for the realtime section store.

Sections live in a Firebase Realtime Database under
``users/{user_id}/sections/{section_id}``. The REST API is addressed with
plain JSON requests through httpx.
"""

from typing import Any, Optional, Protocol
from urllib.parse import quote

import httpx

from irrigation_manager.app.db.models import Section
from irrigation_manager.app.errors import StoreError
from irrigation_manager.app.logging_config import get_logger

logger = get_logger(__name__)


class SectionStore(Protocol):
    """Operations the app needs from a section store.

    All methods raise StoreError when the store cannot complete the call.
    """

    async def list_sections(self, user_id: str) -> list[Section]: ...

    async def upsert_section(self, user_id: str, section: Section) -> None: ...

    async def delete_section(self, user_id: str, section_id: str) -> None: ...

    async def update_elapsed_time(self, user_id: str, section_id: str, elapsed_seconds: int) -> None: ...

    async def close(self) -> None: ...


class RealtimeStoreClient:
    """HTTP client for the Firebase Realtime Database REST API.

    Attributes:
        database_url: Base URL of the database (e.g. "https://x.firebaseio.com")
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        database_url: str,
        auth_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the store client.

        Args:
            database_url: Base URL of the realtime database
            auth_token: Optional database secret or ID token, sent as ``auth``
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.database_url = database_url.rstrip("/")
        self.timeout = timeout
        self._auth_token = auth_token
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "RealtimeStoreClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _sections_url(self, user_id: str, section_id: Optional[str] = None) -> str:
        path = f"users/{quote(user_id, safe='')}/sections"
        if section_id is not None:
            path += f"/{quote(section_id, safe='')}"
        return f"{self.database_url}/{path}.json"

    def _params(self) -> dict[str, str]:
        if self._auth_token:
            return {"auth": self._auth_token}
        return {}

    async def _request(self, method: str, url: str, json: Any = None) -> Any:
        """Send a request and decode the JSON response.

        Raises:
            StoreError: On connection failure, timeout, HTTP error status
                or an undecodable body
        """
        logger.debug(f"{method} {url}")
        try:
            response = await self._client.request(method, url, params=self._params(), json=json)
        except httpx.TimeoutException as e:
            raise StoreError(f"Request to {self.database_url} timed out: {e}")
        except httpx.HTTPError as e:
            raise StoreError(f"Cannot connect to database at {self.database_url}: {e}")

        if response.status_code == 401:
            raise StoreError("Authentication failed (check IRRIGATION_DB_AUTH_TOKEN)", status_code=401)
        if response.status_code >= 400:
            raise StoreError(
                f"Database request failed: {response.text or response.reason_phrase}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"Invalid JSON from database: {e}")

    async def list_sections(self, user_id: str) -> list[Section]:
        """Fetch all sections for a user, in the order the store returns them.

        Args:
            user_id: Owner of the sections

        Returns:
            List of sections (empty if the user has none)
        """
        data = await self._request("GET", self._sections_url(user_id))
        if not data:
            return []

        # Firebase returns an array when keys look like small integers
        if isinstance(data, list):
            items = [(str(index), record) for index, record in enumerate(data)]
        elif isinstance(data, dict):
            items = list(data.items())
        else:
            raise StoreError(f"Unexpected sections payload type: {type(data).__name__}")

        sections = []
        for key, record in items:
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed section record under key {key!r}")
                continue
            if not record.get("Name"):
                # Left behind by an elapsed-time write that raced a delete
                logger.warning(f"Skipping section record without a name under key {key!r}")
                continue
            try:
                sections.append(Section.from_record(record, section_id=key))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed section record under key {key!r}: {e}")
        logger.info(f"Loaded {len(sections)} section(s) for user {user_id}")
        return sections

    async def upsert_section(self, user_id: str, section: Section) -> None:
        """Create or overwrite a section record."""
        await self._request("PUT", self._sections_url(user_id, section.id), json=section.to_record())

    async def delete_section(self, user_id: str, section_id: str) -> None:
        """Delete a section record."""
        await self._request("DELETE", self._sections_url(user_id, section_id))

    async def update_elapsed_time(self, user_id: str, section_id: str, elapsed_seconds: int) -> None:
        """Write only the elapsed-time field of a section.

        PATCH creates the path when it is missing, so a write still in
        flight when the section is deleted leaves a record holding only
        ElapsedTime. TimerController skips writes for sections no longer
        listed, which narrows this to the single write already on the wire,
        and list_sections ignores such nameless records.
        """
        await self._request(
            "PATCH",
            self._sections_url(user_id, section_id),
            json={"ElapsedTime": elapsed_seconds},
        )
