"""
Environment variable loading and validation for AML Screening.

- AML_ENV: development | staging | production (default: development)
- AML_CACHE_BACKEND: memory | redis (default: memory)
- AML_PROVIDER: mock | http (default: mock)
- REDIS_HOST / REDIS_PORT / REDIS_PASSWORD / REDIS_DB
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# config is aml_screening/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

ENVIRONMENTS = ("development", "staging", "production")
CACHE_BACKENDS = ("memory", "redis")
PROVIDERS = ("mock", "http")


def load_aml_env() -> None:
    """Load .env from project root. Existing variables win; safe to call repeatedly."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def _raw(name: str) -> str:
    return (os.getenv(name) or "").strip()


def get_str(name: str, default: str | None = None) -> str | None:
    load_aml_env()
    return _raw(name) or default


def get_int(name: str, default: int) -> int:
    """Integer env var; missing or malformed values fall back to default."""
    load_aml_env()
    raw = _raw(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_float(name: str, default: float) -> float:
    load_aml_env()
    raw = _raw(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_aml_env() -> str:
    """Return AML_ENV lowercased. Unknown values are returned as is (base Redis profile)."""
    load_aml_env()
    return (_raw("AML_ENV") or "development").lower()


def get_cache_backend() -> str:
    load_aml_env()
    raw = _raw("AML_CACHE_BACKEND").lower()
    return raw if raw in CACHE_BACKENDS else "memory"


def get_provider_kind() -> str:
    load_aml_env()
    raw = _raw("AML_PROVIDER").lower()
    return raw if raw in PROVIDERS else "mock"
