"""
Pytest tests for ScreeningService: cache hits, invalidation, TTL refresh,
validation, error propagation, single-flight and metrics.
"""

from __future__ import annotations

import threading
import time

import pytest

from aml_screening.analytics.screening_service import (
    ScreeningService,
    create_screening_service,
)
from aml_screening.cache.backends import KeyValueBackend
from aml_screening.cache.kv_store import RedisKeyValueStore
from aml_screening.cache.screening_cache import CACHE_TTL_MS, ScreeningCache
from aml_screening.config.settings import RedisConfig, Settings
from aml_screening.core.exceptions import CacheUnavailable, InvalidAddress, ScreeningFailed
from aml_screening.core.models import RiskLevel
from aml_screening.providers.http_provider import HttpScreeningProvider
from aml_screening.providers.mock_provider import MockScreeningProvider
from conftest import HIGH_RISK, MEDIUM_RISK, UNLISTED_HOT


class CountingProvider:
    """Wraps a provider and counts screen() calls; optional delay per call."""

    name = "counting"

    def __init__(self, inner, delay_sec: float = 0.0) -> None:
        self.inner = inner
        self.delay_sec = delay_sec
        self.calls = 0
        self._lock = threading.Lock()

    def screen(self, address):
        with self._lock:
            self.calls += 1
        if self.delay_sec:
            time.sleep(self.delay_sec)
        return self.inner.screen(address)

    def close(self):
        self.inner.close()


class FailingProvider:
    name = "failing"

    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def screen(self, address):
        raise self.exc

    def close(self):
        pass


def test_second_screen_within_ttl_is_cache_hit(provider, cache):
    counting = CountingProvider(provider)
    svc = ScreeningService(provider=counting, cache=cache)
    first = svc.screen(HIGH_RISK)
    second = svc.screen(HIGH_RISK)
    assert second == first
    assert second.timestamp == first.timestamp
    assert counting.calls == 1


def test_cache_size_grows_on_miss_only(service):
    assert service.cache_size() == 0
    service.screen(MEDIUM_RISK)
    assert service.cache_size() == 1
    service.screen(MEDIUM_RISK)
    assert service.cache_size() == 1
    service.screen(UNLISTED_HOT)
    assert service.cache_size() == 2
    assert set(service.cached_addresses()) == {MEDIUM_RISK, UNLISTED_HOT}


def test_invalidate_forces_fresh_score(service, clock):
    first = service.screen(HIGH_RISK)
    clock.advance(5)
    assert service.invalidate(HIGH_RISK) is True
    assert service.invalidate(HIGH_RISK) is False
    second = service.screen(HIGH_RISK)
    assert second.timestamp == first.timestamp + 5
    assert second.risk_level in (RiskLevel.HIGH, RiskLevel.EXTREME)


def test_ttl_expiry_forces_fresh_score(service, clock):
    first = service.screen(UNLISTED_HOT)
    clock.advance(CACHE_TTL_MS)
    second = service.screen(UNLISTED_HOT)
    assert second.timestamp == first.timestamp + CACHE_TTL_MS
    assert second.risk_level == RiskLevel.LOW


def test_clear_all(service):
    service.screen(HIGH_RISK)
    service.screen(MEDIUM_RISK)
    service.clear_all()
    assert service.cache_size() == 0
    assert service.cached_addresses() == []


def test_get_cached_does_not_screen(service):
    assert service.get_cached(HIGH_RISK) is None
    r = service.screen(HIGH_RISK)
    assert service.get_cached(HIGH_RISK) is r


@pytest.mark.parametrize("address", ["", "0x123", "hello", HIGH_RISK + "0", "0x" + "z" * 40])
def test_invalid_address_rejected(service, address):
    with pytest.raises(InvalidAddress) as exc_info:
        service.screen(address)
    assert exc_info.value.code == "invalid_address"
    assert exc_info.value.retryable is False
    assert service.cache_size() == 0


def test_validation_can_be_disabled(provider, cache):
    svc = ScreeningService(provider=provider, cache=cache, validate_addresses=False)
    r = svc.screen("0x3")
    assert r.risk_level == RiskLevel.LOW


def test_screening_failed_propagates_unchanged(cache):
    err = ScreeningFailed("provider down", code="timeout")
    svc = ScreeningService(provider=FailingProvider(err), cache=cache)
    with pytest.raises(ScreeningFailed) as exc_info:
        svc.screen(HIGH_RISK)
    assert exc_info.value is err
    assert exc_info.value.retryable is True
    assert svc.cache_size() == 0


def test_unexpected_provider_error_becomes_screening_failed(cache):
    svc = ScreeningService(provider=FailingProvider(RuntimeError("boom")), cache=cache)
    with pytest.raises(ScreeningFailed) as exc_info:
        svc.screen(HIGH_RISK)
    assert exc_info.value.retryable is True
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert svc.metrics().errors == 1


def test_concurrent_misses_for_same_address_score_once(provider, cache):
    counting = CountingProvider(provider, delay_sec=0.05)
    svc = ScreeningService(provider=counting, cache=cache)
    results = []
    results_lock = threading.Lock()

    def worker():
        r = svc.screen(HIGH_RISK)
        with results_lock:
            results.append(r)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert counting.calls == 1
    assert len(results) == 8
    assert all(r == results[0] for r in results)
    assert svc._address_locks == {}


def test_metrics_counts(service):
    service.screen(HIGH_RISK)
    service.screen(HIGH_RISK)
    service.screen(MEDIUM_RISK)
    with pytest.raises(InvalidAddress):
        service.screen("bad")
    m = service.metrics()
    assert m.total_requests == 4
    assert m.cache_hits == 1
    assert m.cache_misses == 2
    assert m.errors == 1
    assert m.average_response_time_ms >= 0
    assert set(m.to_dict()) == {"total_requests", "cache_hits", "cache_misses", "errors", "average_response_time_ms"}


def test_cache_outage_degrades_to_rescoring(provider):
    """With a dead key-value store every screen is a miss, never an error."""

    class DeadStore:
        config = RedisConfig()

        def get(self, key):
            return None

        def set(self, key, value, ttl_sec=None):
            return False

        def keys(self, pattern="*"):
            return []

    counting = CountingProvider(provider)
    svc = ScreeningService(provider=counting, cache=ScreeningCache(KeyValueBackend(DeadStore())))
    svc.screen(HIGH_RISK)
    svc.screen(HIGH_RISK)
    assert counting.calls == 2
    assert svc.cache_size() == 0


def test_create_service_defaults_to_mock_and_memory():
    svc = create_screening_service(Settings(mock_latency_min_sec=0.0, mock_latency_max_sec=0.0))
    try:
        assert isinstance(svc.provider, MockScreeningProvider)
        assert svc.cache.backend_name == "memory"
        assert svc.screen(MEDIUM_RISK).risk_level == RiskLevel.MEDIUM
    finally:
        svc.close()


def test_create_service_falls_back_when_redis_unreachable(monkeypatch):
    monkeypatch.setattr(RedisKeyValueStore, "ping", lambda self: False)
    svc = create_screening_service(Settings(cache_backend="redis"))
    assert svc.cache.backend_name == "memory"
    svc.close()


def test_create_service_requires_cache_when_asked(monkeypatch):
    monkeypatch.setattr(RedisKeyValueStore, "ping", lambda self: False)
    with pytest.raises(CacheUnavailable):
        create_screening_service(Settings(cache_backend="redis"), require_cache=True)


def test_create_service_uses_redis_when_reachable(monkeypatch):
    monkeypatch.setattr(RedisKeyValueStore, "ping", lambda self: True)
    svc = create_screening_service(Settings(cache_backend="redis"))
    assert isinstance(svc.cache.backend, KeyValueBackend)
    assert svc.cache.backend.store.config.key_prefix == "aml:"


def test_create_service_http_provider():
    svc = create_screening_service(Settings(provider="http", provider_url="https://aml.example.com/v1"))
    assert isinstance(svc.provider, HttpScreeningProvider)
    svc.close()
