"""
Unit tests for logging setup module.

This module contains tests for logging configuration, formatting,
and performance decorators.
"""

import json
import logging
import logging.handlers
import sys
import pytest
from pathlib import Path

from inspection.utils.logging_setup import (
    setup_logging,
    get_logger,
    log_performance,
    JSONFormatter
)


def _make_record(msg="Test message", level=logging.INFO, exc_info=None):
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/path/to/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info
    )
    record.funcName = "test_function"
    record.module = "test_module"
    return record


class TestJSONFormatter:
    """Test suite for JSONFormatter class."""

    def test_json_formatter_basic(self):
        """Test basic JSON formatting."""
        formatter = JSONFormatter(datefmt='%Y-%m-%d %H:%M:%S')

        parsed = json.loads(formatter.format(_make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test.logger"
        assert parsed["message"] == "Test message"
        assert parsed["module"] == "test_module"
        assert parsed["function"] == "test_function"
        assert parsed["line"] == 42
        assert "timestamp" in parsed

    def test_json_formatter_with_exception(self):
        """Test JSON formatting with exception information."""
        formatter = JSONFormatter()

        try:
            raise ValueError("Test exception")
        except ValueError:
            record = _make_record("Error occurred", logging.ERROR, sys.exc_info())

        parsed = json.loads(formatter.format(record))

        assert parsed["level"] == "ERROR"
        assert parsed["message"] == "Error occurred"
        assert "ValueError" in parsed["exception"]

    def test_json_formatter_with_extra_fields(self):
        """Test JSON formatting with extra fields."""
        formatter = JSONFormatter()
        record = _make_record()
        record.stage = "evaluate"
        record.store_calls = 3

        parsed = json.loads(formatter.format(record))

        assert parsed["stage"] == "evaluate"
        assert parsed["store_calls"] == 3
        assert "pathname" not in parsed
        assert "args" not in parsed

    def test_json_formatter_serializes_unknown_types(self):
        """Test that non-JSON values in extra fields are rendered as strings."""
        formatter = JSONFormatter()
        record = _make_record()
        record.path = Path("queries/q.json")

        parsed = json.loads(formatter.format(record))

        assert parsed["path"] == str(Path("queries/q.json"))


class TestSetupLogging:
    """Test suite for setup_logging function."""

    def setup_method(self):
        """Reset logging configuration before each test."""
        logger = logging.getLogger()
        logger.handlers.clear()
        logger.setLevel(logging.WARNING)

    def teardown_method(self):
        logger = logging.getLogger()
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_setup_logging_development(self):
        """Test logging setup for development environment."""
        setup_logging(environment="development", log_level="DEBUG")

        logger = logging.getLogger()
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

        handler = logger.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert not isinstance(handler.formatter, JSONFormatter)

    def test_console_output_goes_to_stderr(self):
        """Diagnostics must never mix with stdout."""
        setup_logging(environment="development")

        handler = logging.getLogger().handlers[0]
        assert handler.stream is sys.stderr

    def test_setup_logging_production(self):
        """Test logging setup for production environment."""
        setup_logging(environment="production", log_level="INFO")

        logger = logging.getLogger()
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_setup_logging_with_log_dir(self, tmp_path):
        """Test logging setup with log directory."""
        log_dir = tmp_path / "logs"

        setup_logging(environment="development", log_level="INFO", log_dir=str(log_dir))

        logger = logging.getLogger()
        assert len(logger.handlers) == 2  # Console + File

        file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert (log_dir / "region_query_development.log").exists()

    def test_setup_logging_removes_existing_handlers(self):
        """Test that setup_logging removes existing handlers."""
        logger = logging.getLogger()
        dummy_handler = logging.StreamHandler()
        logger.addHandler(dummy_handler)

        setup_logging(environment="development")

        assert len(logger.handlers) == 1
        assert logger.handlers[0] is not dummy_handler

    def test_setup_logging_quiets_retry_logger(self):
        setup_logging(environment="development", log_level="DEBUG")

        assert logging.getLogger("tenacity").level == logging.WARNING

    def test_setup_logging_invalid_level(self):
        """Test that setup_logging rejects invalid log levels."""
        with pytest.raises(AttributeError):
            setup_logging(environment="development", log_level="INVALID")

    def test_json_logging_output_format(self, tmp_path):
        """Test that JSON logging produces parseable output."""
        setup_logging(environment="production", log_level="INFO", log_dir=str(tmp_path))

        get_logger("test.module").info("Test message", extra={"query_path": "q.json"})
        for handler in logging.getLogger().handlers:
            handler.flush()

        log_content = (tmp_path / "region_query_production.log").read_text().strip()
        parsed = json.loads(log_content.splitlines()[-1])
        assert parsed["message"] == "Test message"
        assert parsed["query_path"] == "q.json"


class TestGetLogger:
    """Test suite for get_logger function."""

    def test_get_logger_returns_logger(self):
        logger = get_logger("test.module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test.module"

    def test_get_logger_same_name_returns_same_logger(self):
        assert get_logger("test.module") is get_logger("test.module")


class TestLogPerformance:
    """Test suite for log_performance decorator."""

    def test_log_performance_success(self, caplog):
        """Test log_performance decorator with successful function."""
        @log_performance
        def test_function():
            return "success"

        with caplog.at_level(logging.INFO):
            result = test_function()

        assert result == "success"
        assert "Starting test_function" in caplog.text
        assert "Completed test_function" in caplog.text

    def test_log_performance_with_exception(self, caplog):
        """Test log_performance decorator with function that raises exception."""
        @log_performance
        def test_function():
            raise ValueError("Test error")

        with caplog.at_level(logging.INFO):
            with pytest.raises(ValueError):
                test_function()

        assert "Starting test_function" in caplog.text
        assert "Failed test_function" in caplog.text
        assert "Test error" in caplog.text

    def test_log_performance_with_args_and_kwargs(self, caplog):
        @log_performance
        def test_function(arg1, arg2, kwarg1=None):
            return f"{arg1}-{arg2}-{kwarg1}"

        with caplog.at_level(logging.INFO):
            result = test_function("a", "b", kwarg1="c")

        assert result == "a-b-c"
        assert "Completed test_function" in caplog.text

    def test_log_performance_preserves_metadata(self):
        """Test that log_performance preserves function metadata."""
        @log_performance
        def test_function():
            """Test function docstring."""

        assert test_function.__name__ == "test_function"
        assert test_function.__doc__ == "Test function docstring."
