"""
In-memory cache of bearer credentials per (enterprise, microservice) pair.

The cache owns the expiry policy: an entry is valid for ``ttl`` seconds after it
was stored. Every operation runs under a single asyncio lock so that concurrent
requests for the same key see whole entries and the last writer wins.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from microservice_client.microservice import Microservice

logger = logging.getLogger(__name__)

CacheKey = tuple[int, Microservice]


@dataclass(frozen=True, slots=True)
class MicroserviceAuthentication:
    """Bearer credential issued for one enterprise against one microservice."""

    token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    authentication: MicroserviceAuthentication
    expires_at: float


class MicroserviceAuthCache:
    """Keyed store of live credentials with a fixed validity window."""

    def __init__(
        self,
        ttl: float = 3600.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be greater than zero.")
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, _CacheEntry] = {}
        self._lock = asyncio.Lock()

    async def try_get_valid_auth(
        self,
        enterprise_id: int,
        microservice: Microservice,
    ) -> MicroserviceAuthentication | None:
        """Return the live credential for the key, or None if absent or expired."""
        key = (enterprise_id, microservice)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                logger.debug(
                    "Cached authentication expired",
                    extra={"enterprise_id": enterprise_id, "microservice": microservice.value},
                )
                return None
            return entry.authentication

    async def add_or_update_auth(
        self,
        enterprise_id: int,
        microservice: Microservice,
        authentication: MicroserviceAuthentication,
    ) -> None:
        """Store a credential for the key, replacing any previous one."""
        async with self._lock:
            self._entries[(enterprise_id, microservice)] = _CacheEntry(
                authentication=authentication,
                expires_at=self._clock() + self._ttl,
            )
        logger.debug(
            "Cached authentication updated",
            extra={"enterprise_id": enterprise_id, "microservice": microservice.value},
        )

    async def invalidate(self, enterprise_id: int, microservice: Microservice) -> None:
        async with self._lock:
            self._entries.pop((enterprise_id, microservice), None)

    def __len__(self) -> int:
        return len(self._entries)
