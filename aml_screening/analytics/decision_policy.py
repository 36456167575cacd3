"""
Decision policy: turn a screening result into allow / flag / block.

Block when level is extreme or score > 90; flag when level is high or
score > 60; allow otherwise. The level check and the raw-score check are
OR'ed, so a medium result scoring 61-69 is flagged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from aml_screening.core.models import RiskLevel, ScreeningResult

BLOCK_SCORE_ABOVE = 90
FLAG_SCORE_ABOVE = 60


class Action(str, Enum):
    ALLOW = "allow"
    FLAG = "flag"
    BLOCK = "block"


REASONS = {
    Action.BLOCK: "Transaction should be blocked due to extremely high risk factors.",
    Action.FLAG: "Transaction should be flagged for manual review due to elevated risk.",
    Action.ALLOW: "Transaction can proceed with standard monitoring.",
}


@dataclass(frozen=True)
class Decision:
    action: Action
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action.value, "reason": self.reason}


def should_block(result: ScreeningResult) -> bool:
    return result.risk_level == RiskLevel.EXTREME or result.risk_score > BLOCK_SCORE_ABOVE


def should_flag(result: ScreeningResult) -> bool:
    return result.risk_level == RiskLevel.HIGH or result.risk_score > FLAG_SCORE_ABOVE


def decide(result: ScreeningResult) -> Decision:
    """Recommended action for a pending transaction to the screened address."""
    if should_block(result):
        action = Action.BLOCK
    elif should_flag(result):
        action = Action.FLAG
    else:
        action = Action.ALLOW
    return Decision(action=action, reason=REASONS[action])


FLAG_CATEGORIES = ("sanctions", "criminal", "exchange", "mixer", "other")

# Checked in order; first match wins
_CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("sanctions", ("sanction", "ofac")),
    ("criminal", ("criminal", "illicit", "fraud")),
    ("exchange", ("exchange", "cex")),
    ("mixer", ("mixer", "tumbler")),
)


def categorize_flag(flag: str) -> str:
    lowered = flag.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return category
    return "other"


def categorize_flags(flags: Iterable[str]) -> dict[str, list[str]]:
    """
    Partition flags into sanctions / criminal / exchange / mixer / other by
    case-insensitive keyword. Each flag lands in exactly one bucket; order kept.
    """
    buckets: dict[str, list[str]] = {name: [] for name in FLAG_CATEGORIES}
    for flag in flags:
        buckets[categorize_flag(flag)].append(flag)
    return buckets
