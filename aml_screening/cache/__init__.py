"""
Screening result cache.

ScreeningCache applies the fixed TTL; backends hold the entries (in-memory
dict or the Redis key-value store).
"""

from aml_screening.cache.backends import InMemoryBackend, KeyValueBackend
from aml_screening.cache.kv_store import RedisKeyValueStore
from aml_screening.cache.screening_cache import CACHE_TTL_MS, ScreeningCache

__all__ = [
    "CACHE_TTL_MS",
    "InMemoryBackend",
    "KeyValueBackend",
    "RedisKeyValueStore",
    "ScreeningCache",
]
