"""
Screening providers: where risk scores come from.

MockScreeningProvider simulates a remote AML API (latency + synthetic
scores); HttpScreeningProvider calls a real HTTP endpoint. Both raise
ScreeningFailed on failure and never downgrade to a default result.
"""

from aml_screening.providers.base import ScreeningProvider
from aml_screening.providers.http_provider import HttpScreeningProvider
from aml_screening.providers.mock_provider import MockScreeningProvider

__all__ = [
    "HttpScreeningProvider",
    "MockScreeningProvider",
    "ScreeningProvider",
]
