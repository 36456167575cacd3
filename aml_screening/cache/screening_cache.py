"""
Time-bounded cache of screening results keyed by address.

An entry is live while now - stored_at < TTL (6 hours). Expired entries read
as absent and are evicted lazily on that read, or in bulk by
cleanup_expired(). size() and keys() report raw backend contents, expired
but not yet evicted entries included. No capacity bound: growth is limited
only by TTL eviction.

Backend failures (CacheUnavailable) degrade to no-cache behaviour: reads
miss, writes are dropped, both logged.
"""

from __future__ import annotations

from aml_screening.cache.backends import CacheBackend, InMemoryBackend
from aml_screening.core.exceptions import CacheUnavailable
from aml_screening.core.models import CACHE_TTL_MS, CacheEntry, Clock, ScreeningResult, now_ms
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)


def _short(address: str) -> str:
    return address[:10] + "..." if len(address) > 10 else address


class ScreeningCache:
    """Address -> ScreeningResult with a fixed TTL over a pluggable backend."""

    def __init__(
        self,
        backend: CacheBackend | None = None,
        clock: Clock = now_ms,
        ttl_ms: int = CACHE_TTL_MS,
    ) -> None:
        self.backend = backend or InMemoryBackend()
        self._clock = clock
        self.ttl_ms = ttl_ms

    @property
    def backend_name(self) -> str:
        return self.backend.name

    def get(self, address: str) -> ScreeningResult | None:
        """Live result for address, or None if missing or expired."""
        entry = self.backend.get_entry(address)
        if entry is None:
            return None
        if entry.is_expired(self._clock(), self.ttl_ms):
            logger.debug("screening_cache_expired", address=_short(address), stored_at=entry.stored_at)
            try:
                self.backend.delete(address)
            except CacheUnavailable as e:
                logger.warning("screening_cache_evict_failed", address=_short(address), error=e.message)
            return None
        return entry.result

    def set(self, address: str, result: ScreeningResult) -> None:
        """Insert or overwrite; stored_at is now."""
        entry = CacheEntry(result=result, stored_at=self._clock())
        try:
            self.backend.put_entry(address, entry)
        except CacheUnavailable as e:
            logger.warning("screening_cache_set_failed", address=_short(address), error=e.message)

    def delete(self, address: str) -> bool:
        """Remove address; True if an entry was removed."""
        try:
            return self.backend.delete(address)
        except CacheUnavailable as e:
            logger.warning("screening_cache_delete_failed", address=_short(address), error=e.message)
            return False

    def clear(self) -> None:
        try:
            self.backend.clear()
        except CacheUnavailable as e:
            logger.warning("screening_cache_clear_failed", error=e.message)

    def size(self) -> int:
        return self.backend.size()

    def keys(self) -> list[str]:
        """Stored addresses (no duplicates), expired-but-unevicted ones included."""
        return self.backend.keys()

    def cleanup_expired(self) -> int:
        """Physically remove every expired entry. Returns how many were removed."""
        now = self._clock()
        removed = 0
        for address in self.backend.keys():
            entry = self.backend.get_entry(address)
            if entry is not None and entry.is_expired(now, self.ttl_ms) and self.delete(address):
                removed += 1
        if removed:
            logger.info("screening_cache_cleanup", removed=removed, remaining=self.size())
        return removed
