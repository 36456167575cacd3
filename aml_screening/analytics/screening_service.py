"""
Screening service: cache lookup -> provider on miss -> write-through.

Single entrypoint for the API server, CLI and any UI layer. Constructed
explicitly (create_screening_service) and passed to consumers; there is no
module-level instance.

Concurrent misses for the same address are serialized by a per-address lock
and the cache is re-checked after acquiring it, so one address is scored
once per TTL window even under concurrent requests.
"""

from __future__ import annotations

import random
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from aml_screening.cache.backends import InMemoryBackend, KeyValueBackend
from aml_screening.cache.kv_store import RedisKeyValueStore
from aml_screening.cache.screening_cache import ScreeningCache
from aml_screening.config.settings import Settings, get_settings
from aml_screening.core.exceptions import AMLScreeningError, CacheUnavailable, InvalidAddress, ScreeningFailed
from aml_screening.core.models import ScreeningResult
from aml_screening.providers.base import ScreeningProvider
from aml_screening.providers.http_provider import HttpScreeningProvider
from aml_screening.providers.mock_provider import MockScreeningProvider
from aml_screening.screening_logging import get_logger
from aml_screening.utils.address_utils import is_valid_address, truncate_address

logger = get_logger(__name__)


@dataclass
class ScreeningMetrics:
    """Request counters; average_response_time_ms covers successful screens."""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    errors: int = 0
    average_response_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "errors": self.errors,
            "average_response_time_ms": round(self.average_response_time_ms, 3),
        }


class ScreeningService:
    """Screens addresses through a provider with a TTL cache in front."""

    def __init__(
        self,
        provider: ScreeningProvider,
        cache: ScreeningCache | None = None,
        validate_addresses: bool = True,
    ) -> None:
        self.provider = provider
        self.cache = cache or ScreeningCache()
        self.validate_addresses = validate_addresses
        self._metrics = ScreeningMetrics()
        self._completed = 0
        self._metrics_lock = threading.Lock()
        # address -> [lock, holders]; entries dropped when no thread holds or waits
        self._address_locks: dict[str, list[Any]] = {}
        self._address_locks_guard = threading.Lock()

    @contextmanager
    def _address_lock(self, address: str) -> Iterator[None]:
        with self._address_locks_guard:
            slot = self._address_locks.setdefault(address, [threading.Lock(), 0])
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._address_locks_guard:
                slot[1] -= 1
                if slot[1] == 0:
                    self._address_locks.pop(address, None)

    def _record(self, *, hit: bool | None = None, error: bool = False, elapsed_ms: float | None = None) -> None:
        with self._metrics_lock:
            m = self._metrics
            if hit is True:
                m.cache_hits += 1
            elif hit is False:
                m.cache_misses += 1
            if error:
                m.errors += 1
            if elapsed_ms is not None:
                self._completed += 1
                m.average_response_time_ms += (elapsed_ms - m.average_response_time_ms) / self._completed

    def screen(self, address: str) -> ScreeningResult:
        """
        Return the live cached result for address, or score it and cache it.

        Raises InvalidAddress for malformed input (when validation is on) and
        propagates ScreeningFailed from the provider unchanged.
        """
        with self._metrics_lock:
            self._metrics.total_requests += 1
        if self.validate_addresses and not is_valid_address(address):
            self._record(error=True)
            logger.info("aml_screen_invalid_address", address=str(address)[:16])
            raise InvalidAddress(address)

        started = time.perf_counter()
        short = truncate_address(address)

        cached = self.cache.get(address)
        if cached is not None:
            self._record(hit=True, elapsed_ms=(time.perf_counter() - started) * 1000)
            logger.debug("aml_screen_cache_hit", address=short, risk_level=cached.risk_level.value)
            return cached

        with self._address_lock(address):
            cached = self.cache.get(address)
            if cached is not None:
                self._record(hit=True, elapsed_ms=(time.perf_counter() - started) * 1000)
                logger.debug("aml_screen_cache_hit", address=short, after_wait=True)
                return cached

            self._record(hit=False)
            try:
                result = self.provider.screen(address)
            except AMLScreeningError as e:
                self._record(error=True)
                logger.warning("aml_screen_failed", address=short, code=e.code, retryable=e.retryable)
                raise
            except Exception as e:
                self._record(error=True)
                logger.exception("aml_screen_provider_error", address=short, error=str(e))
                raise ScreeningFailed(
                    "Failed to screen address. Please try again.",
                    details={"address": address, "error": str(e)},
                ) from e
            self.cache.set(address, result)

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._record(elapsed_ms=elapsed_ms)
        logger.info(
            "aml_screen_scored",
            address=short,
            risk_score=result.risk_score,
            risk_level=result.risk_level.value,
            wallet_type=result.wallet_type.value,
            flags=list(result.flags),
            elapsed_ms=round(elapsed_ms, 1),
        )
        return result

    # Cache introspection used by screening history / refresh views

    def cache_size(self) -> int:
        return self.cache.size()

    def cached_addresses(self) -> list[str]:
        return self.cache.keys()

    def get_cached(self, address: str) -> ScreeningResult | None:
        return self.cache.get(address)

    def invalidate(self, address: str) -> bool:
        removed = self.cache.delete(address)
        logger.info("aml_cache_invalidated", address=truncate_address(address), removed=removed)
        return removed

    def clear_all(self) -> None:
        self.cache.clear()
        logger.info("aml_cache_cleared")

    def cleanup_expired(self) -> int:
        return self.cache.cleanup_expired()

    def metrics(self) -> ScreeningMetrics:
        """Snapshot copy of the counters."""
        with self._metrics_lock:
            m = self._metrics
            return ScreeningMetrics(
                total_requests=m.total_requests,
                cache_hits=m.cache_hits,
                cache_misses=m.cache_misses,
                errors=m.errors,
                average_response_time_ms=m.average_response_time_ms,
            )

    def close(self) -> None:
        self.provider.close()
        backend = self.cache.backend
        if isinstance(backend, KeyValueBackend):
            backend.store.close()


def _build_cache(settings: Settings, require_cache: bool) -> ScreeningCache:
    if settings.cache_backend != "redis":
        return ScreeningCache(InMemoryBackend())
    store = RedisKeyValueStore(settings.redis)
    if store.ping():
        logger.info(
            "aml_cache_backend_redis",
            host=settings.redis.host,
            db=settings.redis.db,
            prefix=settings.redis.key_prefix,
        )
        return ScreeningCache(KeyValueBackend(store))
    if require_cache:
        raise CacheUnavailable(
            "Redis cache backend is unreachable",
            details={"host": settings.redis.host, "port": settings.redis.port},
        )
    logger.warning("aml_cache_backend_fallback", reason="redis_unreachable", fallback="memory")
    store.close()
    return ScreeningCache(InMemoryBackend())


def _build_provider(settings: Settings, rng: random.Random | None) -> ScreeningProvider:
    if settings.provider == "http":
        return HttpScreeningProvider(
            base_url=settings.provider_url or "",
            api_key=settings.provider_api_key,
            timeout_sec=settings.api_timeout_sec,
            max_retries=settings.max_retries,
        )
    return MockScreeningProvider(
        rng=rng,
        latency_sec=(settings.mock_latency_min_sec, settings.mock_latency_max_sec),
        timeout_sec=settings.api_timeout_sec,
    )


def create_screening_service(
    settings: Settings | None = None,
    rng: random.Random | None = None,
    require_cache: bool = False,
) -> ScreeningService:
    """
    Build a service from settings. An unreachable Redis degrades to the
    in-memory cache unless require_cache is set (then CacheUnavailable).
    """
    settings = settings or get_settings()
    service = ScreeningService(
        provider=_build_provider(settings, rng),
        cache=_build_cache(settings, require_cache),
    )
    logger.info(
        "aml_screening_service_ready",
        env=settings.env,
        provider=service.provider.name,
        cache_backend=service.cache.backend_name,
    )
    return service
