"""
Data models for address screening.

ScreeningResult is the immutable value handed to callers and stored in the
cache; CacheEntry wraps it with the write time. RiskLevel and RiskScore are
validated together on construction so one never exists without the other.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class WalletType(str, Enum):
    """Hot (online, frequently used) vs cold (offline storage) wallet."""

    HOT = "hot"
    COLD = "cold"


class RiskLevel(str, Enum):
    """Ordered risk level: low < medium < high < extreme."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


MIN_RISK_SCORE = 0
MAX_RISK_SCORE = 100

# Inclusive score range each level may carry. Medium reaches 69 because the
# medium tier scores in [40, 69]; high starts at 61 per the score thresholds.
LEVEL_SCORE_RANGES: dict[RiskLevel, tuple[int, int]] = {
    RiskLevel.LOW: (0, 39),
    RiskLevel.MEDIUM: (40, 69),
    RiskLevel.HIGH: (61, 90),
    RiskLevel.EXTREME: (91, 100),
}


def risk_level_for_score(score: int) -> RiskLevel:
    """
    Threshold mapping from raw score to level:
    > 90 extreme, 61-90 high, 40-60 medium, < 40 low.

    Scoring tiers remain the source of truth for results they produce; this is
    used only where no tier is known (e.g. a provider response without a level).
    """
    if score > 90:
        return RiskLevel.EXTREME
    if score > 60:
        return RiskLevel.HIGH
    if score >= 40:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


@dataclass(frozen=True)
class ScreeningResult:
    """
    Outcome of screening one address.

    flags keeps insertion order and is not deduplicated. timestamp is set once
    at scoring time (epoch ms) and is never refreshed on cache reads.
    """

    address: str
    risk_score: int
    risk_level: RiskLevel
    flags: tuple[str, ...]
    timestamp: int
    wallet_type: WalletType
    provider: str
    confidence: int

    def __post_init__(self) -> None:
        # Coerce plain strings / lists so results built from JSON stay hashable and typed
        object.__setattr__(self, "risk_level", RiskLevel(self.risk_level))
        object.__setattr__(self, "wallet_type", WalletType(self.wallet_type))
        object.__setattr__(self, "flags", tuple(self.flags))
        score = self.risk_score
        if isinstance(score, bool) or not isinstance(score, int):
            raise ValueError(f"risk_score must be an integer, got {score!r}")
        if not MIN_RISK_SCORE <= score <= MAX_RISK_SCORE:
            raise ValueError(f"risk_score {score} outside [{MIN_RISK_SCORE}, {MAX_RISK_SCORE}]")
        low, high = LEVEL_SCORE_RANGES[self.risk_level]
        if not low <= score <= high:
            raise ValueError(
                f"risk_score {score} inconsistent with risk_level {self.risk_level.value} "
                f"(expected {low}-{high})"
            )
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence {self.confidence} outside [0, 100]")

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "flags": list(self.flags),
            "timestamp": self.timestamp,
            "wallet_type": self.wallet_type.value,
            "provider": self.provider,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScreeningResult:
        return cls(
            address=str(data["address"]),
            risk_score=int(data["risk_score"]),
            risk_level=RiskLevel(data["risk_level"]),
            flags=tuple(str(f) for f in data.get("flags") or ()),
            timestamp=int(data["timestamp"]),
            wallet_type=WalletType(data["wallet_type"]),
            provider=str(data["provider"]),
            confidence=int(data["confidence"]),
        )


CACHE_TTL_MS = 6 * 60 * 60 * 1000
CACHE_TTL_SEC = CACHE_TTL_MS // 1000


@dataclass(frozen=True)
class CacheEntry:
    """A cached result and the time (epoch ms) it was written."""

    result: ScreeningResult
    stored_at: int = field(default_factory=now_ms)

    def is_expired(self, now: int, ttl_ms: int) -> bool:
        return now - self.stored_at >= ttl_ms

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result.to_dict(), "stored_at": self.stored_at}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CacheEntry:
        return cls(result=ScreeningResult.from_dict(data["result"]), stored_at=int(data["stored_at"]))
