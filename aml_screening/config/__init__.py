"""
Configuration management for AML Screening.

Loads settings from environment variables and an optional project-root
.env file. get_settings() is the single source of truth.
"""

from aml_screening.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
