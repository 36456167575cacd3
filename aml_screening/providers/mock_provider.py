"""
Mock AML provider: classify + score with a simulated network delay.

The delay is drawn uniformly from latency_sec and waited on a threading.Event,
so close() cancels in-flight calls and no call waits longer than timeout_sec.
"""

from __future__ import annotations

import random
import threading

from aml_screening.analytics.address_classifier import classify_address
from aml_screening.analytics.risk_scorer import PROVIDER_NAME, score_address
from aml_screening.core.exceptions import ScreeningFailed
from aml_screening.core.models import Clock, ScreeningResult, now_ms
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)

DEFAULT_LATENCY_SEC = (1.0, 3.0)
DEFAULT_TIMEOUT_SEC = 10.0


class MockScreeningProvider:
    """Synthetic screening with injectable randomness, clock and latency."""

    name = PROVIDER_NAME

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Clock = now_ms,
        latency_sec: tuple[float, float] = DEFAULT_LATENCY_SEC,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        low, high = latency_sec
        if low < 0 or high < low:
            raise ValueError(f"invalid latency range {latency_sec!r}")
        self._rng = rng or random.Random()
        self._clock = clock
        self._latency_sec = (low, high)
        self._timeout_sec = timeout_sec
        self._closed = threading.Event()

    def _simulate_latency(self, address: str) -> None:
        low, high = self._latency_sec
        if high <= 0:
            return
        delay = self._rng.uniform(low, high)
        wait = min(delay, self._timeout_sec)
        if self._closed.wait(wait):
            raise ScreeningFailed(
                "Screening cancelled: provider is shutting down",
                code="cancelled",
                retryable=False,
                details={"address": address},
            )
        if delay > self._timeout_sec:
            logger.warning("mock_provider_timeout", address=address[:10] + "...", timeout_sec=self._timeout_sec)
            raise ScreeningFailed(
                "Failed to screen address. Please try again.",
                code="timeout",
                details={"address": address, "timeout_sec": self._timeout_sec},
            )

    def screen(self, address: str) -> ScreeningResult:
        if self._closed.is_set():
            raise ScreeningFailed("Provider is closed", code="cancelled", retryable=False)
        self._simulate_latency(address)
        wallet_type = classify_address(address)
        return score_address(address, wallet_type, rng=self._rng, clock=self._clock)

    def close(self) -> None:
        self._closed.set()
