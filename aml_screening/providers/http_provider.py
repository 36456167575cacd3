"""
HTTP AML provider: POST <base_url>/screen and map the flat JSON response.

Transport errors, timeouts, 429 and 5xx are retryable and retried with
exponential backoff up to max_retries attempts; other 4xx responses and
malformed bodies fail immediately. Every failure surfaces as ScreeningFailed.
"""

from __future__ import annotations

import time
from typing import Any, Mapping

import httpx

from aml_screening.analytics.address_classifier import classify_address
from aml_screening.core.exceptions import ScreeningFailed
from aml_screening.core.models import (
    Clock,
    ScreeningResult,
    WalletType,
    now_ms,
    risk_level_for_score,
)
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF_SEC = 0.5
BLOCKCHAIN = "ethereum"

FLAG_SANCTIONS = "Sanctioned entity"
FLAG_PEP = "Politically exposed person"


def _pick(data: Mapping[str, Any], camel: str, snake: str) -> Any:
    value = data.get(camel)
    return data.get(snake) if value is None else value


def _is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class HttpScreeningProvider:
    """Screening backed by a remote AML API over httpx."""

    name = "HTTP AML Provider"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff_sec: float = DEFAULT_RETRY_BACKOFF_SEC,
        client: httpx.Client | None = None,
        clock: Clock = now_ms,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required for the HTTP provider")
        self._url = base_url.rstrip("/") + "/screen"
        self._max_retries = max(1, max_retries)
        self._retry_backoff_sec = retry_backoff_sec
        self._clock = clock
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_sec)
        self._headers = headers

    def _request_once(self, address: str) -> ScreeningResult:
        body = {"address": address, "blockchain": BLOCKCHAIN}
        try:
            r = self._client.post(self._url, json=body, headers=self._headers)
        except httpx.TimeoutException as e:
            raise ScreeningFailed("AML provider timed out", code="timeout", details={"error": str(e)}) from e
        except httpx.HTTPError as e:
            raise ScreeningFailed("AML provider unreachable", code="network_error", details={"error": str(e)}) from e

        if r.status_code >= 400:
            raise ScreeningFailed(
                f"AML provider returned HTTP {r.status_code}",
                code="provider_http_error",
                retryable=_is_retryable_status(r.status_code),
                details={"status_code": r.status_code},
            )
        try:
            data = r.json()
        except ValueError as e:
            raise ScreeningFailed(
                "AML provider returned a non-JSON body",
                code="invalid_response",
                retryable=False,
            ) from e
        return self._to_result(address, data)

    def _to_result(self, address: str, data: Any) -> ScreeningResult:
        if not isinstance(data, Mapping):
            raise ScreeningFailed("AML provider response is not an object", code="invalid_response", retryable=False)
        try:
            risk_score = int(_pick(data, "riskScore", "risk_score"))
            risk_level = _pick(data, "riskLevel", "risk_level") or risk_level_for_score(risk_score)
            flags = [str(f) for f in data.get("flags") or []]
            if data.get("sanctions") and not any("sanction" in f.lower() for f in flags):
                flags.append(FLAG_SANCTIONS)
            if data.get("pep") and FLAG_PEP not in flags:
                flags.append(FLAG_PEP)
            wallet_type = _pick(data, "walletType", "wallet_type") or classify_address(address)
            timestamp = data.get("timestamp")
            return ScreeningResult(
                address=address,
                risk_score=risk_score,
                risk_level=risk_level,
                flags=tuple(flags),
                timestamp=int(timestamp) if timestamp is not None else self._clock(),
                wallet_type=WalletType(wallet_type),
                provider=str(data.get("provider") or self.name),
                confidence=int(data.get("confidence") or 0),
            )
        except (TypeError, ValueError) as e:
            raise ScreeningFailed(
                f"AML provider response could not be parsed: {e}",
                code="invalid_response",
                retryable=False,
            ) from e

    def screen(self, address: str) -> ScreeningResult:
        attempt = 0
        while True:
            try:
                return self._request_once(address)
            except ScreeningFailed as e:
                logger.warning(
                    "http_provider_attempt_failed",
                    address=address[:10] + "...",
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                    code=e.code,
                    retryable=e.retryable,
                )
                if not e.retryable or attempt + 1 >= self._max_retries:
                    raise
                if self._retry_backoff_sec > 0:
                    time.sleep(self._retry_backoff_sec * (2 ** attempt))
            attempt += 1

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
