"""Tests for structured logging utilities."""

import json
import logging
import threading
import uuid

from timelog.config.logging_config import LoggingConfig, configure_logging, reset_logging
from timelog.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    get_log_context,
    sanitize_sensitive_data,
)


class TestGenerateCorrelationId:
    """Test correlation ID generation."""

    def test_format(self):
        uuid.UUID(generate_correlation_id())

    def test_uniqueness(self):
        ids = [generate_correlation_id() for _ in range(100)]
        assert len(set(ids)) == 100


class TestLogContext:
    """Test LogContext context manager."""

    def teardown_method(self):
        reset_logging()

    def _configure(self, log_file):
        configure_logging(
            LoggingConfig(
                log_format="json",
                enable_console=False,
                enable_file=True,
                log_file=str(log_file),
            )
        )

    def _records(self, log_file):
        for handler in logging.getLogger().handlers:
            handler.flush()
        return [json.loads(line) for line in log_file.read_text().strip().split("\n")]

    def test_context_fields_added_and_removed(self, tmp_path):
        log_file = tmp_path / "test.log"
        self._configure(log_file)
        logger = logging.getLogger("timelog.test")

        with LogContext(session_id="s-1"):
            with LogContext(delivery_id="d-1"):
                logger.info("inside")
            logger.info("outer")
        logger.info("outside")

        inside, outer, outside = self._records(log_file)
        assert inside["session_id"] == "s-1"
        assert inside["delivery_id"] == "d-1"
        assert "delivery_id" not in outer
        assert "session_id" not in outside

    def test_get_log_context(self):
        assert get_log_context() == {}
        with LogContext(session_id="s-1"):
            assert get_log_context() == {"session_id": "s-1"}
        assert get_log_context() == {}

    def test_context_is_thread_local(self):
        seen = {}

        def worker():
            seen["context"] = get_log_context()

        with LogContext(session_id="s-1"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen["context"] == {}


class TestSanitizeSensitiveData:
    """Test sensitive data sanitization."""

    def test_authorization_header(self):
        headers = {"Authorization": "Bearer abc", "Content-Type": "application/json"}

        sanitized = sanitize_sensitive_data(headers)

        assert sanitized["Authorization"] == "***REDACTED***"
        assert sanitized["Content-Type"] == "application/json"
        assert headers["Authorization"] == "Bearer abc"

    def test_nested_api_key(self):
        data = {"llm": {"api_key": "sk-123", "model": "gpt"}}

        sanitized = sanitize_sensitive_data(data)

        assert sanitized["llm"]["api_key"] == "***REDACTED***"
        assert sanitized["llm"]["model"] == "gpt"

    def test_none_stays_none(self):
        assert sanitize_sensitive_data({"token": None}) == {"token": None}

    def test_non_dict_passthrough(self):
        assert sanitize_sensitive_data("text") == "text"
