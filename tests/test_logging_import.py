"""
Test that screening_logging imports cleanly, the logger works and LOG_LEVEL /
LOG_FORMAT are honoured from the project .env.
"""

from __future__ import annotations

import io
import json
import logging

import pytest

from aml_screening.screening_logging.logger import configure_logging, resolve_log_level


@pytest.fixture
def restore_logging():
    yield
    configure_logging()


def test_logging_import():
    from aml_screening.screening_logging import bind_address, get_logger

    logger = get_logger("test")
    assert logger is not None
    for method in ("info", "debug", "warning", "error"):
        assert hasattr(logger, method)
    logger.info("test_message", key="value")
    bind_address("0x6B175474E89094C44Da98b954EedeAC495271d0F").info("test_bound")


def test_env_file_log_level_filters_info(tmp_path, monkeypatch, restore_logging):
    from aml_screening.screening_logging import get_logger

    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_LEVEL=ERROR\nLOG_FORMAT=json\n")
    buf = io.StringIO()

    configure_logging(env_file=env_file, stream=buf)
    logger = get_logger("level_check")
    logger.info("info_should_be_filtered")
    logger.error("error_is_kept", code="x")

    lines = [json.loads(line) for line in buf.getvalue().splitlines()]
    assert [line["event_type"] for line in lines] == ["error_is_kept"]
    assert lines[0]["logger"] == "level_check"
    assert lines[0]["level"] == "error"
    assert lines[0]["timestamp"].endswith("Z")


def test_process_env_wins_over_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_LEVEL=ERROR\n")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert resolve_log_level(env_file) == logging.DEBUG
    monkeypatch.setenv("LOG_LEVEL", "nonsense")
    assert resolve_log_level(env_file) == logging.INFO
    monkeypatch.delenv("LOG_LEVEL")
    assert resolve_log_level(env_file) == logging.ERROR
