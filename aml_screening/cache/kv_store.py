"""
Redis key-value store for screening results.

Every key is namespaced under RedisConfig.key_prefix and written with the
config TTL. Operations never raise on Redis failure: they log and return
None / False / [] / {} so a flaky store cannot fail a screening request.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping, TypeVar

import redis

from aml_screening.config.settings import RedisConfig
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SOCKET_TIMEOUT_SEC = 2
_MEMORY_RE = re.compile(r"used_memory_human:(.+)")


class RedisKeyValueStore:
    """Prefix-namespaced string store over redis-py."""

    def __init__(self, config: RedisConfig, client: redis.Redis | None = None) -> None:
        self.config = config
        self._client = client or redis.Redis(
            host=config.host,
            port=config.port,
            password=config.password,
            db=config.db,
            decode_responses=True,
            socket_connect_timeout=SOCKET_TIMEOUT_SEC,
            socket_timeout=SOCKET_TIMEOUT_SEC,
        )

    def _full_key(self, key: str) -> str:
        return f"{self.config.key_prefix}{key}"

    def _strip(self, full_key: Any) -> str:
        if isinstance(full_key, bytes):
            full_key = full_key.decode("utf-8")
        prefix = self.config.key_prefix
        return full_key[len(prefix):] if full_key.startswith(prefix) else full_key

    def _call(self, op: str, fn: Callable[[], T], default: T) -> T:
        try:
            return fn()
        except redis.RedisError as e:
            logger.warning(f"kv_store_{op}_failed", error=str(e), prefix=self.config.key_prefix)
            return default

    def get(self, key: str) -> str | None:
        return self._call("get", lambda: self._client.get(self._full_key(key)), None)

    def set(self, key: str, value: str, ttl_sec: int | None = None) -> bool:
        expiry = ttl_sec or self.config.ttl_sec

        def _set() -> bool:
            self._client.setex(self._full_key(key), expiry, value)
            return True

        return self._call("set", _set, False)

    def delete(self, key: str) -> bool:
        """True once the delete was issued (whether or not the key existed)."""

        def _delete() -> bool:
            self._client.delete(self._full_key(key))
            return True

        return self._call("delete", _delete, False)

    def exists(self, key: str) -> bool:
        return self._call("exists", lambda: self._client.exists(self._full_key(key)) == 1, False)

    def keys(self, pattern: str = "*") -> list[str]:
        """Matching keys with the namespace prefix removed. Uses SCAN, not KEYS."""
        match = self._full_key(pattern)
        return self._call(
            "keys",
            lambda: [self._strip(k) for k in self._client.scan_iter(match=match)],
            [],
        )

    def mget(self, keys: list[str]) -> list[str | None]:
        if not keys:
            return []
        return self._call("mget", lambda: list(self._client.mget([self._full_key(k) for k in keys])), [])

    def mset(self, pairs: Mapping[str, str], ttl_sec: int | None = None) -> bool:
        expiry = ttl_sec or self.config.ttl_sec

        def _mset() -> bool:
            pipe = self._client.pipeline()
            for key, value in pairs.items():
                pipe.setex(self._full_key(key), expiry, value)
            pipe.execute()
            return True

        return self._call("mset", _mset, False)

    def clear(self) -> bool:
        """Delete every key in this store's namespace (not the whole Redis db)."""

        def _clear() -> bool:
            full_keys = list(self._client.scan_iter(match=self._full_key("*")))
            if full_keys:
                self._client.delete(*full_keys)
            return True

        return self._call("clear", _clear, False)

    def ping(self) -> bool:
        return self._call("ping", lambda: bool(self._client.ping()), False)

    def stats(self) -> dict[str, Any]:
        """total_keys, memory_usage (human string) and keyspace hit_rate."""

        def _stats() -> dict[str, Any]:
            memory = self._client.info("memory")
            keyspace = self._client.info("stats")
            hits = int(keyspace.get("keyspace_hits", 0))
            misses = int(keyspace.get("keyspace_misses", 0))
            return {
                "total_keys": int(self._client.dbsize()),
                "memory_usage": _parse_memory_usage(memory),
                "hit_rate": hits / max(hits + misses, 1),
            }

        return self._call("stats", _stats, {"total_keys": 0, "memory_usage": "0B", "hit_rate": 0.0})

    def cleanup(self) -> int:
        """
        Re-apply the namespace TTL to keys stored without one and count keys
        that vanished between SCAN and TTL. Returns that count.
        """

        def _cleanup() -> int:
            gone = 0
            for full_key in self._client.scan_iter(match=self._full_key("*")):
                ttl = self._client.ttl(full_key)
                if ttl == -1:
                    self._client.expire(full_key, self.config.ttl_sec)
                elif ttl == -2:
                    gone += 1
            return gone

        return self._call("cleanup", _cleanup, 0)

    def close(self) -> None:
        self._call("close", self._client.close, None)


def _parse_memory_usage(info: Any) -> str:
    if isinstance(info, Mapping):
        value = info.get("used_memory_human")
        return str(value).strip() if value is not None else "0B"
    match = _MEMORY_RE.search(str(info))
    return match.group(1).strip() if match else "0B"
