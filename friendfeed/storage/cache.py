"""In-process response cache with a per-entry time-to-live."""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import structlog

from ..ingestion.interfaces import CacheInterface

logger = structlog.get_logger()


@dataclass(frozen=True)
class CachedResponse:
    """A serialized response body and its expiry."""
    body: bytes
    ttl_seconds: int
    expires_at: float


class MemoryCache(CacheInterface):
    """Dictionary-backed cache keyed by request path.

    Expired entries are dropped on every write, and once max_size live
    entries are held the oldest is evicted to make room.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, max_size: int = 128):
        self._entries: Dict[str, CachedResponse] = {}
        self.max_size = max_size
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get(self, key: str) -> Optional[CachedResponse]:
        async with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                return None
            if cached.expires_at <= self._clock():
                del self._entries[key]
                logger.debug("cache_expired", key=key)
                return None
            return cached

    async def put(self, key: str, body: bytes, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        async with self._lock:
            now = self._clock()
            self._evict_expired(now)
            self._entries.pop(key, None)
            while self._entries and len(self._entries) >= self.max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("cache_evicted", key=oldest)
            self._entries[key] = CachedResponse(
                body=body,
                ttl_seconds=ttl_seconds,
                expires_at=now + ttl_seconds,
            )

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, cached in self._entries.items() if cached.expires_at <= now]
        for key in expired:
            del self._entries[key]

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
