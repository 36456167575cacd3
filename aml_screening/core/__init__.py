"""
Core types and cross-cutting concerns.

Screening value objects (ScreeningResult, CacheEntry, enums) and the
application exception hierarchy shared by analytics, cache, providers
and the API server.
"""
