"""
Structured logging for AML Screening.

JSON logs with timestamp, event_type and address where relevant.
Use get_logger() in all modules.
"""

from aml_screening.screening_logging.logger import bind_address, get_logger

__all__ = ["bind_address", "get_logger"]
