"""Tests for structured logging configuration."""

import json
import logging
from io import StringIO

import pytest

from boshen.utils.structured_logging import configure_structured_logging, get_logger


@pytest.fixture
def log_stream():
    """Route logs to an in-memory stream, restoring test logging afterwards."""
    stream = StringIO()
    yield stream
    configure_structured_logging(log_level="WARNING")


def test_json_events(log_stream):
    """Test structured events are rendered as JSON lines."""
    configure_structured_logging(log_level="INFO", stream=log_stream)

    get_logger("boshen.test").info("regression.completed", cases=2)

    record = json.loads(log_stream.getvalue().strip().splitlines()[-1])
    assert record["event"] == "regression.completed"
    assert record["cases"] == 2
    assert record["level"] == "info"
    assert "timestamp" in record


def test_level_filters_events(log_stream):
    configure_structured_logging(log_level="ERROR", stream=log_stream)

    get_logger("boshen.test").info("engine.created")

    assert log_stream.getvalue() == ""


def test_stdlib_loggers_share_stream(log_stream):
    """Test module loggers write to the configured stream."""
    configure_structured_logging(log_level="INFO", stream=log_stream)

    logging.getLogger("boshen.test").info("Cache initialized")

    assert "Cache initialized" in log_stream.getvalue()


def test_console_renderer(log_stream):
    configure_structured_logging(log_level="INFO", json_logs=False, stream=log_stream)

    get_logger("boshen.test").warning("batch.cancelled", remaining=3)

    output = log_stream.getvalue()
    assert "batch.cancelled" in output
    assert "remaining" in output
