"""Tests for logging setup, formatters and context fields."""

import json
import logging
from unittest.mock import patch

import pytest

from screen_relay.logging import (
    ConsoleFormatter,
    LokiJSONFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from screen_relay.middlewares.correlation_id import correlation_id


def make_record(msg: str = "Test message", level: int = logging.INFO):
    return logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="/test/test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def context():
    """Sets a correlation id and connection fields, cleaned up afterwards."""
    clear_log_context()
    token = correlation_id.set("3f2a9c1d")
    set_log_context(connection_id="conn-1", session_id="ab12cd34")
    yield
    correlation_id.reset(token)
    clear_log_context()


class TestLogContext:
    """Test log context management."""

    def test_set_log_context_merges_fields(self):
        clear_log_context()
        set_log_context(connection_id="conn-1")
        set_log_context(session_id="ab12cd34", role="producer")

        assert get_log_context() == {
            "connection_id": "conn-1",
            "session_id": "ab12cd34",
            "role": "producer",
        }
        clear_log_context()

    def test_none_removes_field(self):
        """Detach clears session fields by setting them to None."""
        clear_log_context()
        set_log_context(connection_id="conn-1", session_id="ab12cd34")

        set_log_context(session_id=None)

        assert get_log_context() == {"connection_id": "conn-1"}
        clear_log_context()

    def test_previous_dict_not_mutated(self):
        clear_log_context()
        set_log_context(connection_id="conn-1")
        before = get_log_context()

        set_log_context(session_id="ab12cd34")

        assert before == {"connection_id": "conn-1"}
        clear_log_context()


class TestConsoleFormatter:
    """Test the stdout formatter."""

    def test_info_line(self, context):
        line = ConsoleFormatter().format(make_record())

        assert "[3f2a9c1d] INFO: Test message" in line
        assert line.endswith("| connection_id=conn-1 session_id=ab12cd34")

    def test_warning_names_location(self):
        line = ConsoleFormatter().format(
            make_record("Something failed", logging.WARNING)
        )

        assert "[-] WARNING " in line
        assert ":10: Something failed" in line
        assert "|" not in line


class TestLokiJSONFormatter:
    """Test the JSON formatter used for Loki."""

    def test_fields(self, context):
        entry = json.loads(LokiJSONFormatter().format(make_record()))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "test_logger"
        assert entry["message"] == "Test message"
        assert entry["request_id"] == "3f2a9c1d"
        assert entry["connection_id"] == "conn-1"
        assert entry["session_id"] == "ab12cd34"
        assert "environment" in entry

    def test_oversized_message_truncated(self):
        with patch("screen_relay.logging.LOKI_MAX_LOG_SIZE_BYTES", 2000):
            line = LokiJSONFormatter().format(make_record("x" * 5000))

        assert len(line) <= 2000
        assert json.loads(line)["message"].endswith(" [truncated]")


class TestExcludeMetricsFilter:
    """Test the uvicorn access log filter."""

    def test_filters_monitoring_paths(self):
        from screen_relay.uvicorn_filters import ExcludeMetricsFilter

        log_filter = ExcludeMetricsFilter()

        assert not log_filter.filter(make_record('"GET /metrics HTTP/1.1" 200'))
        assert not log_filter.filter(make_record('"GET /health HTTP/1.1" 200'))
        assert log_filter.filter(make_record('"POST /sessions HTTP/1.1" 201'))
