"""
Human-readable formatting and plain-text screening reports.

Used by the API report endpoint and the screen_address CLI.
"""

from __future__ import annotations

from datetime import datetime, timezone

from aml_screening.analytics.decision_policy import categorize_flags, decide
from aml_screening.core.models import ScreeningResult

REPORT_FOOTER = "Generated by AML Screening v1.0"

RISK_DESCRIPTIONS = {
    "low": "This address appears to be safe with minimal risk indicators.",
    "medium": "This address has some risk factors that require attention.",
    "high": "This address has significant risk factors. Proceed with caution.",
    "extreme": "This address is extremely high risk. Transaction should be blocked.",
}

WALLET_TYPE_DESCRIPTIONS = {
    "hot": (
        "Hot wallets are connected to the internet and typically used for frequent "
        "transactions. They may include exchange wallets, web wallets, or mobile wallets."
    ),
    "cold": (
        "Cold wallets are offline storage solutions that provide enhanced security. "
        "They include hardware wallets, paper wallets, or air-gapped systems."
    ),
}

# (bucket, heading) in report order
_SECTIONS = (
    ("sanctions", "Sanctions"),
    ("criminal", "Criminal Activity"),
    ("exchange", "Exchange Related"),
    ("mixer", "Mixer/Tumbler"),
    ("other", "Other Factors"),
)


def format_risk_level(risk_level: str) -> str:
    return risk_level[:1].upper() + risk_level[1:]


def risk_description(risk_level: str) -> str:
    return RISK_DESCRIPTIONS.get(risk_level, "Risk level unknown.")


def wallet_type_description(wallet_type: str) -> str:
    return WALLET_TYPE_DESCRIPTIONS.get(wallet_type, "Wallet type could not be determined.")


def format_confidence(confidence: int) -> str:
    if confidence >= 90:
        return "Very High"
    if confidence >= 75:
        return "High"
    if confidence >= 60:
        return "Medium"
    if confidence >= 40:
        return "Low"
    return "Very Low"


def risk_percentage(risk_score: float) -> float:
    return min(max(risk_score, 0), 100)


def format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def generate_report(result: ScreeningResult) -> str:
    """
    Plain-text AML screening report: header, scores, recommended action and
    flags grouped by category (empty groups omitted).
    """
    decision = decide(result)
    lines = [
        "AML Screening Report",
        "===================",
        "",
        f"Address: {result.address}",
        f"Screening Date: {format_timestamp(result.timestamp)}",
        f"Risk Score: {result.risk_score}/100",
        f"Risk Level: {format_risk_level(result.risk_level.value)}",
        f"Wallet Type: {format_risk_level(result.wallet_type.value)} Wallet",
        f"Confidence: {result.confidence}% ({format_confidence(result.confidence)})",
        f"Provider: {result.provider}",
        "",
        f"Recommended Action: {decision.action.value.upper()}",
        f"Reason: {decision.reason}",
    ]

    if result.flags:
        groups = categorize_flags(result.flags)
        lines += ["", f"Risk Factors ({len(result.flags)}):"]
        for bucket, heading in _SECTIONS:
            if not groups[bucket]:
                continue
            lines += ["", f"{heading}:"]
            lines += [f"- {flag}" for flag in groups[bucket]]

    lines += ["", "---", REPORT_FOOTER]
    return "\n".join(lines) + "\n"
