"""
Application settings.

Gathers the env helpers from config.env into frozen, typed settings objects
consumed by the service factory, API server and CLI. Redis profiles per
environment mirror the deployment layout: dev/staging/prod each get their
own db index, key prefix and key TTL.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from aml_screening.config.env import (
    get_aml_env,
    get_cache_backend,
    get_float,
    get_int,
    get_provider_kind,
    get_str,
)

DEFAULT_KEY_PREFIX = "aml:"
DEFAULT_REDIS_TTL_SEC = 6 * 60 * 60


@dataclass(frozen=True)
class RedisConfig:
    """Connection and namespacing for the Redis key-value store."""

    host: str = "localhost"
    port: int = 6379
    password: str | None = None
    db: int = 0
    key_prefix: str = DEFAULT_KEY_PREFIX
    ttl_sec: int = DEFAULT_REDIS_TTL_SEC
    """Physical key expiry in Redis; ScreeningCache applies its own fixed TTL on read."""


def base_redis_config() -> RedisConfig:
    return RedisConfig(
        host=get_str("REDIS_HOST", "localhost") or "localhost",
        port=get_int("REDIS_PORT", 6379),
        password=get_str("REDIS_PASSWORD"),
        db=get_int("REDIS_DB", 0),
    )


def get_redis_config_for_env(env: str, base: RedisConfig | None = None) -> RedisConfig:
    """Per-environment Redis profile; unknown env keeps the base config."""
    cfg = base or base_redis_config()
    if env == "development":
        return replace(cfg, db=0, key_prefix="dev:aml:", ttl_sec=1 * 60 * 60)
    if env == "staging":
        return replace(cfg, db=1, key_prefix="staging:aml:", ttl_sec=3 * 60 * 60)
    if env == "production":
        return replace(cfg, db=2, key_prefix="prod:aml:", ttl_sec=6 * 60 * 60)
    return cfg


@dataclass(frozen=True)
class Settings:
    """Typed runtime settings. Build with get_settings()."""

    env: str = "development"
    cache_backend: str = "memory"
    redis: RedisConfig = RedisConfig()
    provider: str = "mock"
    provider_url: str | None = None
    provider_api_key: str | None = None
    api_timeout_sec: float = 10.0
    max_retries: int = 3
    mock_latency_min_sec: float = 1.0
    mock_latency_max_sec: float = 3.0
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Return settings resolved from the current environment (and .env)."""
    env = get_aml_env()
    latency_min = max(0.0, get_float("AML_MOCK_LATENCY_MIN_SEC", 1.0))
    latency_max = max(latency_min, get_float("AML_MOCK_LATENCY_MAX_SEC", 3.0))
    return Settings(
        env=env,
        cache_backend=get_cache_backend(),
        redis=get_redis_config_for_env(env),
        provider=get_provider_kind(),
        provider_url=get_str("AML_PROVIDER_URL"),
        provider_api_key=get_str("AML_PROVIDER_API_KEY"),
        api_timeout_sec=max(0.1, get_float("AML_API_TIMEOUT_SEC", 10.0)),
        max_retries=max(1, get_int("AML_MAX_RETRIES", 3)),
        mock_latency_min_sec=latency_min,
        mock_latency_max_sec=latency_max,
        api_host=get_str("API_HOST", "0.0.0.0") or "0.0.0.0",
        api_port=get_int("API_PORT", 8000),
        log_level=(get_str("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
