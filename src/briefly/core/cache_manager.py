"""Summary cache on Redis keyed by input fingerprint.

Every operation degrades instead of raising: a Redis outage reads as a miss
and writes become no-ops, so the job pipeline never fails because of the cache.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Cache performance statistics."""
    hits: int = 0
    misses: int = 0
    sets: int = 0
    errors: int = 0
    hit_ratio: float = 0.0
    total_requests: int = 0


class ResultCache:
    """Summaries by ``input_hash`` with a fixed time-to-live."""

    def __init__(self, client: Any, prefix: str = "summary:", default_ttl: int = 3600):
        self.client = client
        self.prefix = prefix
        self.default_ttl = default_ttl
        self._stats = CacheStats()
        self._stats_lock = asyncio.Lock()

    def _make_key(self, key: str) -> str:
        """Create a prefixed cache key."""
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> str | None:
        """Return the cached summary, or None if absent, expired or unreachable."""
        cache_key = self._make_key(key)

        try:
            value = await self.client.get(cache_key)
        except Exception as e:
            logger.warning(f"Error getting cache key {cache_key}: {e}")
            await self._record(miss=True, error=True)
            return None

        if value is None or value == "":
            await self._record(miss=True)
            return None
        await self._record(hit=True)
        return str(value)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Store a summary. Returns False instead of raising when Redis is unavailable."""
        cache_key = self._make_key(key)
        ttl = ttl or self.default_ttl

        try:
            success = await self.client.set(cache_key, value, ex=ttl)
        except Exception as e:
            logger.warning(f"Error setting cache key {cache_key}: {e}")
            await self._record(error=True)
            return False

        if success:
            async with self._stats_lock:
                self._stats.sets += 1
        return bool(success)

    async def ttl_remaining(self, key: str) -> int | None:
        """Seconds until the entry expires; None when it is gone, has no TTL, or Redis is down."""
        cache_key = self._make_key(key)

        try:
            remaining = await self.client.ttl(cache_key)
        except Exception as e:
            logger.warning(f"Error reading TTL for cache key {cache_key}: {e}")
            await self._record(error=True)
            return None

        # Redis answers -2 for a missing key and -1 for a key without expiry.
        if remaining is None or remaining < 0:
            return None
        return int(remaining)

    async def get_stats(self) -> CacheStats:
        """Get current cache statistics."""
        async with self._stats_lock:
            if self._stats.total_requests > 0:
                self._stats.hit_ratio = self._stats.hits / self._stats.total_requests
            return self._stats

    async def _record(self, *, hit: bool = False, miss: bool = False, error: bool = False) -> None:
        async with self._stats_lock:
            if hit:
                self._stats.hits += 1
                self._stats.total_requests += 1
            if miss:
                self._stats.misses += 1
                self._stats.total_requests += 1
            if error:
                self._stats.errors += 1
