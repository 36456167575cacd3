"""
Risk scorer: derive risk score, level and flags from an address and its wallet type.

Three tiers driven by static lists:
  high-risk list   -> score 70-99, level high (extreme above 90)
  medium-risk list -> score 40-69, level medium
  everything else  -> score 0-39, level low
Scores and confidence are drawn from an injectable random.Random so tests can
pin them; flags and level are fully determined by tier (plus score > 90 /
> 20 checks inside the tier). Tier membership, not the raw score, decides the level.
"""

from __future__ import annotations

import random

from aml_screening.core.models import Clock, RiskLevel, ScreeningResult, WalletType, now_ms
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)

PROVIDER_NAME = "Mock AML Provider"

HIGH_RISK_ADDRESSES = frozenset({
    "0x6B175474E89094C44Da98b954EedeAC495271d0F",
    "0x514910771AF9Ca656af840dff83E8264EcF986CA",
})

MEDIUM_RISK_ADDRESSES = frozenset({
    "0x8C8D7C46219D9205f056f28fee5950aD564d7465",
})

TIER_HIGH = "high"
TIER_MEDIUM = "medium"
TIER_DEFAULT = "default"

# Inclusive score range per tier
TIER_SCORE_RANGES: dict[str, tuple[int, int]] = {
    TIER_HIGH: (70, 99),
    TIER_MEDIUM: (40, 69),
    TIER_DEFAULT: (0, 39),
}
CONFIDENCE_RANGE = (80, 99)

EXTREME_SCORE_ABOVE = 90
NEW_ADDRESS_SCORE_ABOVE = 20

FLAG_SANCTIONED = "Sanctioned entity"
FLAG_SUSPICIOUS = "Suspicious activity"
FLAG_OFAC = "OFAC restricted"
FLAG_EXCHANGE_WALLET = "Exchange wallet"
FLAG_UNVERIFIED_EXCHANGE = "Unverified exchange"
FLAG_HOT_WALLET = "Hot wallet detected"
FLAG_NEW_ADDRESS = "New address"
FLAG_COLD_STORAGE = "Cold storage wallet"


def risk_tier(address: str) -> str:
    if address in HIGH_RISK_ADDRESSES:
        return TIER_HIGH
    if address in MEDIUM_RISK_ADDRESSES:
        return TIER_MEDIUM
    return TIER_DEFAULT


def score_address(
    address: str,
    wallet_type: WalletType,
    rng: random.Random | None = None,
    clock: Clock = now_ms,
) -> ScreeningResult:
    """
    Score one address. Never fails for well-formed input.

    Returns a ScreeningResult with provider and timestamp filled in.
    """
    rng = rng or random.Random()
    tier = risk_tier(address)
    low, high = TIER_SCORE_RANGES[tier]
    risk_score = rng.randint(low, high)
    flags: list[str] = []

    if tier == TIER_HIGH:
        risk_level = RiskLevel.EXTREME if risk_score > EXTREME_SCORE_ABOVE else RiskLevel.HIGH
        flags.extend((FLAG_SANCTIONED, FLAG_SUSPICIOUS))
        if risk_score > EXTREME_SCORE_ABOVE:
            flags.append(FLAG_OFAC)
        if wallet_type == WalletType.HOT:
            flags.append(FLAG_EXCHANGE_WALLET)
    elif tier == TIER_MEDIUM:
        risk_level = RiskLevel.MEDIUM
        flags.append(FLAG_UNVERIFIED_EXCHANGE)
        if wallet_type == WalletType.HOT:
            flags.append(FLAG_HOT_WALLET)
    else:
        risk_level = RiskLevel.LOW
        if risk_score > NEW_ADDRESS_SCORE_ABOVE:
            flags.append(FLAG_NEW_ADDRESS)
        if wallet_type == WalletType.COLD:
            flags.append(FLAG_COLD_STORAGE)

    result = ScreeningResult(
        address=address,
        risk_score=risk_score,
        risk_level=risk_level,
        flags=tuple(flags),
        timestamp=clock(),
        wallet_type=wallet_type,
        provider=PROVIDER_NAME,
        confidence=rng.randint(*CONFIDENCE_RANGE),
    )
    logger.debug(
        "risk_scorer_result",
        address=address[:10] + "...",
        tier=tier,
        wallet_type=wallet_type.value,
        risk_score=risk_score,
        risk_level=risk_level.value,
        flags=flags,
    )
    return result
