"""
Pytest fixtures for AML screening tests.

Fake clock (epoch ms, advanced by hand), seeded RNG, zero-latency mock
provider, in-memory cache, service and FastAPI TestClient.
"""

from __future__ import annotations

import random

import pytest

from aml_screening.analytics.screening_service import ScreeningService
from aml_screening.cache.backends import InMemoryBackend
from aml_screening.cache.screening_cache import ScreeningCache
from aml_screening.providers.mock_provider import MockScreeningProvider

HIGH_RISK = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
HIGH_RISK_2 = "0x514910771AF9Ca656af840dff83E8264EcF986CA"
MEDIUM_RISK = "0x8C8D7C46219D9205f056f28fee5950aD564d7465"
COLD_STORAGE = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
# Unlisted; suffix 0x1111 = 4369, 4369 % 3 == 1 -> hot
UNLISTED_HOT = "0x" + "1" * 40
# Unlisted; suffix 0x0003 -> cold
UNLISTED_COLD = "0x" + "a" * 36 + "0003"

START_MS = 1_700_000_000_000


class FakeClock:
    """Callable clock returning epoch ms; advance() moves it forward."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FixedRng:
    """Stand-in for random.Random returning queued randint values in order."""

    def __init__(self, *values: int) -> None:
        self.values = list(values)

    def randint(self, a: int, b: int) -> int:
        value = self.values.pop(0)
        assert a <= value <= b, f"queued {value} outside [{a}, {b}]"
        return value

    def uniform(self, a: float, b: float) -> float:
        return a


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def cache(clock):
    return ScreeningCache(InMemoryBackend(), clock=clock)


@pytest.fixture
def provider(rng, clock):
    return MockScreeningProvider(rng=rng, clock=clock, latency_sec=(0.0, 0.0))


@pytest.fixture
def service(provider, cache):
    return ScreeningService(provider=provider, cache=cache)


@pytest.fixture
def client(service):
    """FastAPI TestClient over an injected zero-latency service."""
    from fastapi.testclient import TestClient

    from aml_screening.api_server.server import create_app

    return TestClient(create_app(service))
