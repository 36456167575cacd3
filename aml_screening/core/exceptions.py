"""
Application-level exceptions.

Every error carries a stable code, a human message, optional details and a
retryable hint so the API layer and UI callers can decide whether to offer
a retry. Providers raise ScreeningFailed; the service propagates it as is.
"""

from __future__ import annotations

from typing import Any


class AMLScreeningError(Exception):
    """Base class for screening errors."""

    default_code = "aml_error"
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.retryable = self.default_retryable if retryable is None else retryable

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
            "retryable": self.retryable,
        }
        if self.details:
            out["details"] = self.details
        return out


class InvalidAddress(AMLScreeningError):
    """Address is not of the form 0x + 40 hex characters."""

    default_code = "invalid_address"

    def __init__(self, address: str, message: str | None = None) -> None:
        super().__init__(
            message or "Invalid address: expected 0x followed by 40 hex characters",
            details={"address": address},
        )
        self.address = address


class ScreeningFailed(AMLScreeningError):
    """Underlying provider or network failure. Retryable unless stated otherwise."""

    default_code = "screening_failed"
    default_retryable = True


class CacheUnavailable(AMLScreeningError):
    """Backing key-value store could not serve a cache operation."""

    default_code = "cache_unavailable"
    default_retryable = True
