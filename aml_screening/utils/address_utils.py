"""Address validation and display helpers."""

from __future__ import annotations

import re

ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")


def is_valid_address(address: str) -> bool:
    """Return True if address is 0x followed by exactly 40 hex characters."""
    return isinstance(address, str) and ADDRESS_RE.fullmatch(address) is not None


def truncate_address(address: str, start_chars: int = 6, end_chars: int = 4) -> str:
    """0x6B17...1d0F style shortening; short addresses are returned unchanged."""
    if len(address) <= start_chars + end_chars:
        return address
    return f"{address[:start_chars]}...{address[len(address) - end_chars:]}"
