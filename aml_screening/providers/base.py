"""Provider interface consumed by ScreeningService."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from aml_screening.core.models import ScreeningResult


@runtime_checkable
class ScreeningProvider(Protocol):
    name: str

    def screen(self, address: str) -> ScreeningResult:
        """Score one address or raise ScreeningFailed."""
        ...

    def close(self) -> None:
        ...
