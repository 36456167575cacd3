"""
Wallet type classification for address screening.

Classifies an address as hot or cold before risk scoring so the scorer can
attach wallet-specific flags. Known exchange and cold-storage addresses are
matched first; everything else falls back to a deterministic heuristic on
the trailing hex digits, so the same address always gets the same type.
"""

from __future__ import annotations

from aml_screening.core.models import WalletType
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)

# Known exchange (hot) wallets
EXCHANGE_ADDRESSES = frozenset({
    "0x8C8D7C46219D9205f056f28fee5950aD564d7465",
    "0x6B175474E89094C44Da98b954EedeAC495271d0F",
    "0x514910771AF9Ca656af840dff83E8264EcF986CA",
})

# Known cold-storage wallets
COLD_STORAGE_ADDRESSES = frozenset({
    "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
})

FALLBACK_SUFFIX_LEN = 4
FALLBACK_COLD_MODULUS = 3


def _fallback_wallet_type(address: str) -> WalletType:
    """Last 4 hex chars as an integer: divisible by 3 -> cold, else hot."""
    body = address[2:] if address[:2].lower() == "0x" else address
    suffix = body[-FALLBACK_SUFFIX_LEN:]
    try:
        value = int(suffix, 16)
    except ValueError:
        # empty or non-hex tail: no signal, treat as hot
        return WalletType.HOT
    return WalletType.COLD if value % FALLBACK_COLD_MODULUS == 0 else WalletType.HOT


def classify_address(address: str) -> WalletType:
    """
    Classify an address as hot or cold. Total: any string yields a type.

    Order: known exchange list -> hot, known cold-storage list -> cold,
    otherwise trailing-digit heuristic.
    """
    if address in EXCHANGE_ADDRESSES:
        wallet_type = WalletType.HOT
    elif address in COLD_STORAGE_ADDRESSES:
        wallet_type = WalletType.COLD
    else:
        wallet_type = _fallback_wallet_type(address)
    logger.debug("address_classified", address=address[:10] + "...", wallet_type=wallet_type.value)
    return wallet_type
