"""
API server package: HTTP interface over the screening service.

Exposes screening, decisions, reports and cache introspection to UI
clients. Delegates all logic to ScreeningService and the decision policy.
"""
