"""Request-scoped session lookup: correlation id -> logged-in enterprise."""

import asyncio
import logging
import uuid

logger = logging.getLogger(__name__)

EMPTY_SESSION_ID = uuid.UUID(int=0)


class SessionDataStore:
    """In-memory registry of logged-in callers keyed by correlation id."""

    def __init__(self) -> None:
        self._sessions: dict[uuid.UUID, int] = {}
        self._lock = asyncio.Lock()

    async def open_session(self, enterprise_id: int) -> uuid.UUID:
        """Register a logged-in enterprise and return its new correlation id."""
        if enterprise_id <= 0:
            raise ValueError("enterprise_id must be a positive integer.")
        correlation_id = uuid.uuid4()
        async with self._lock:
            self._sessions[correlation_id] = enterprise_id
        logger.info(
            "Session opened",
            extra={"correlation_id": str(correlation_id), "enterprise_id": enterprise_id},
        )
        return correlation_id

    async def close_session(self, correlation_id: uuid.UUID) -> None:
        async with self._lock:
            removed = self._sessions.pop(correlation_id, None)
        if removed is not None:
            logger.info("Session closed", extra={"correlation_id": str(correlation_id)})

    async def get_logged_enterprise(self, correlation_id: uuid.UUID) -> int | None:
        """Return the enterprise bound to the correlation id, if any."""
        if correlation_id == EMPTY_SESSION_ID:
            return None
        async with self._lock:
            return self._sessions.get(correlation_id)
