"""
Pytest tests for env-driven settings.
"""

from __future__ import annotations

import pytest

from aml_screening.config import get_settings

ENV_VARS = (
    "AML_ENV", "AML_CACHE_BACKEND", "AML_PROVIDER", "AML_PROVIDER_URL", "AML_PROVIDER_API_KEY",
    "AML_API_TIMEOUT_SEC", "AML_MAX_RETRIES", "AML_MOCK_LATENCY_MIN_SEC", "AML_MOCK_LATENCY_MAX_SEC",
    "REDIS_HOST", "REDIS_PORT", "REDIS_PASSWORD", "REDIS_DB", "API_HOST", "API_PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = get_settings()
    assert s.env == "development"
    assert s.cache_backend == "memory"
    assert s.provider == "mock"
    assert s.api_timeout_sec == 10.0
    assert s.max_retries == 3
    assert (s.mock_latency_min_sec, s.mock_latency_max_sec) == (1.0, 3.0)
    assert s.redis.key_prefix == "dev:aml:"
    assert s.redis.ttl_sec == 3600


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("AML_ENV", "Production")
    monkeypatch.setenv("AML_CACHE_BACKEND", "REDIS")
    monkeypatch.setenv("REDIS_HOST", "redis.internal")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("REDIS_PASSWORD", "pw")
    monkeypatch.setenv("AML_PROVIDER", "http")
    monkeypatch.setenv("AML_PROVIDER_URL", "https://aml.example.com")
    monkeypatch.setenv("API_PORT", "9000")
    s = get_settings()
    assert s.env == "production"
    assert s.cache_backend == "redis"
    assert (s.redis.host, s.redis.port, s.redis.password) == ("redis.internal", 6380, "pw")
    assert (s.redis.db, s.redis.key_prefix, s.redis.ttl_sec) == (2, "prod:aml:", 21600)
    assert s.provider == "http"
    assert s.provider_url == "https://aml.example.com"
    assert s.api_port == 9000


def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("AML_CACHE_BACKEND", "memcached")
    monkeypatch.setenv("AML_PROVIDER", "oracle")
    monkeypatch.setenv("REDIS_PORT", "not-a-port")
    monkeypatch.setenv("AML_MAX_RETRIES", "0")
    monkeypatch.setenv("AML_MOCK_LATENCY_MIN_SEC", "2.5")
    monkeypatch.setenv("AML_MOCK_LATENCY_MAX_SEC", "1.0")
    s = get_settings()
    assert s.cache_backend == "memory"
    assert s.provider == "mock"
    assert s.redis.port == 6379
    assert s.max_retries == 1
    assert (s.mock_latency_min_sec, s.mock_latency_max_sec) == (2.5, 2.5)
