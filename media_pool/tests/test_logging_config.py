"""Tests for logging setup."""

import io
import json
import logging

import pytest

from media_pool.logging_config import JsonFormatter, setup_logging


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def make_record(self, **extra):
        record = logging.LogRecord(
            name="media_pool.health_checks",
            level=logging.WARNING,
            pathname="health_checks.py",
            lineno=10,
            msg="%s is overloaded",
            args=("media-server-1",),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_format_basic(self):
        output = JsonFormatter().format(self.make_record())
        data = json.loads(output)

        assert data["level"] == "WARNING"
        assert data["logger"] == "media_pool.health_checks"
        assert data["message"] == "media-server-1 is overloaded"
        assert "timestamp" in data

    def test_format_with_extra_fields(self):
        output = JsonFormatter().format(self.make_record(server_id="media-server-1", active_streams=21))
        data = json.loads(output)

        assert data["server_id"] == "media-server-1"
        assert data["active_streams"] == 21
        assert "args" not in data

    def test_format_with_exception(self):
        try:
            raise RuntimeError("probe exploded")
        except RuntimeError:
            import sys

            record = self.make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: probe exploded" in data["exception"]


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_text_output(self):
        stream = io.StringIO()
        setup_logging("DEBUG", stream=stream)

        logging.getLogger("media_pool.test").debug("hello")

        assert "media_pool.test - DEBUG - hello" in stream.getvalue()

    def test_json_output(self):
        stream = io.StringIO()
        setup_logging("INFO", json_format=True, stream=stream)

        logging.getLogger("media_pool.test").info("started", extra={"servers": 2})

        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "started"
        assert data["servers"] == 2

    def test_level_filtering(self):
        stream = io.StringIO()
        setup_logging("error", stream=stream)

        logging.getLogger("media_pool.test").warning("ignored")

        assert stream.getvalue() == ""
