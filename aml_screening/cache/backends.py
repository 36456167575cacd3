"""
Storage backends behind ScreeningCache.

InMemoryBackend keeps CacheEntry objects in a lock-guarded dict (the
default). KeyValueBackend stores JSON-encoded entries in a RedisKeyValueStore
so a server deployment can share the cache across processes. Both expose the
same small interface; neither applies the TTL, ScreeningCache does.
"""

from __future__ import annotations

import json
import threading
from typing import Protocol

from aml_screening.cache.kv_store import RedisKeyValueStore
from aml_screening.core.exceptions import CacheUnavailable
from aml_screening.core.models import CACHE_TTL_SEC, CacheEntry
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)


class CacheBackend(Protocol):
    name: str

    def get_entry(self, address: str) -> CacheEntry | None: ...

    def put_entry(self, address: str, entry: CacheEntry) -> None: ...

    def delete(self, address: str) -> bool: ...

    def keys(self) -> list[str]: ...

    def size(self) -> int: ...

    def clear(self) -> None: ...


class InMemoryBackend:
    """Unbounded dict of address -> CacheEntry; insertion order kept for keys()."""

    name = "memory"

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get_entry(self, address: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(address)

    def put_entry(self, address: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[address] = entry

    def delete(self, address: str) -> bool:
        with self._lock:
            return self._entries.pop(address, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class KeyValueBackend:
    """
    CacheEntry storage on top of the Redis key-value store.

    Reads that fail look like misses (the store returns None). Writes, deletes
    and clears that fail raise CacheUnavailable for ScreeningCache to absorb.

    Keys are written with the longer of the store's profile TTL and
    min_ttl_sec, so Redis never drops an entry ScreeningCache still treats
    as live.
    """

    name = "redis"

    def __init__(self, store: RedisKeyValueStore, min_ttl_sec: int = CACHE_TTL_SEC) -> None:
        self.store = store
        self.ttl_sec = max(store.config.ttl_sec, min_ttl_sec)

    def get_entry(self, address: str) -> CacheEntry | None:
        raw = self.store.get(address)
        if raw is None:
            return None
        try:
            return CacheEntry.from_dict(json.loads(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("kv_backend_corrupt_entry", address=address[:10] + "...", error=str(e))
            self.store.delete(address)
            return None

    def put_entry(self, address: str, entry: CacheEntry) -> None:
        if not self.store.set(address, json.dumps(entry.to_dict()), ttl_sec=self.ttl_sec):
            raise CacheUnavailable("Failed to write screening result to key-value store")

    def delete(self, address: str) -> bool:
        if not self.store.exists(address):
            return False
        if not self.store.delete(address):
            raise CacheUnavailable("Failed to delete screening result from key-value store")
        return True

    def keys(self) -> list[str]:
        return self.store.keys("*")

    def size(self) -> int:
        return len(self.keys())

    def clear(self) -> None:
        if not self.store.clear():
            raise CacheUnavailable("Failed to clear key-value store namespace")
