"""
structlog setup for the screening service.

Every record is one line on stdout carrying level, an ISO-8601 UTC timestamp,
the snake_case event under event_type, the module logger name and keyword
fields. LOG_LEVEL and LOG_FORMAT (json | console) come from the process
environment first and the project-root .env second, the same precedence
config.env uses. The .env file is read with dotenv_values so importing this
module never mutates os.environ.

Imports nothing from aml_screening so any module can import it first.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, TextIO

import structlog
from dotenv import dotenv_values

# aml_screening/screening_logging/ -> project root
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "json"


def _setting(name: str, default: str, env_file: Path) -> str:
    value = (os.getenv(name) or "").strip()
    if not value and env_file.is_file():
        value = (dotenv_values(env_file).get(name) or "").strip()
    return value or default


def resolve_log_level(env_file: Path = ENV_FILE) -> int:
    """Numeric level for LOG_LEVEL; unknown names fall back to INFO."""
    name = _setting("LOG_LEVEL", DEFAULT_LEVEL, env_file).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def resolve_log_format(env_file: Path = ENV_FILE) -> str:
    return _setting("LOG_FORMAT", DEFAULT_FORMAT, env_file).lower()


def configure_logging(
    level: int | None = None,
    fmt: str | None = None,
    env_file: Path = ENV_FILE,
    stream: TextIO | None = None,
) -> None:
    """
    (Re)configure structlog. Loggers obtained from get_logger() afterwards use
    the new settings; ones bound earlier keep theirs.
    """
    level = resolve_log_level(env_file) if level is None else level
    fmt = resolve_log_format(env_file) if fmt is None else fmt
    out = stream or sys.stdout

    renderer: Any
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.EventRenamer("event_type"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Structured logger for a module, with logger=name bound.

        logger = get_logger(__name__)
        logger.info("aml_screen_scored", address="0x6B17...", risk_level="high")
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_address(address: str) -> structlog.BoundLogger:
    """Logger with the (truncated) address bound to every subsequent call."""
    short = address[:10] + "..." if len(address) > 10 else address
    return get_logger("aml_screening").bind(address=short)
