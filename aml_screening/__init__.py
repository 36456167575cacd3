"""
AML Screening: address risk-screening service for wallet transfers.

Classifies counterparty addresses (hot/cold), scores their AML risk,
caches results for a fixed TTL and turns them into allow/flag/block
decisions. Modular layout: analytics (classifier, scorer, policy, service),
providers, cache backends, API server.
"""

__version__ = "0.1.0"
