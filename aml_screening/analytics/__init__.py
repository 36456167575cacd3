"""
Screening analytics.

Computes wallet type, risk score and recommended action for an address.
Modules: address_classifier, risk_scorer, decision_policy, report,
screening_service (import it directly; it depends on providers and cache).
"""

from aml_screening.analytics.address_classifier import classify_address
from aml_screening.analytics.decision_policy import categorize_flags, decide
from aml_screening.analytics.risk_scorer import score_address

__all__ = [
    "classify_address",
    "score_address",
    "decide",
    "categorize_flags",
]
