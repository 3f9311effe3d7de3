"""Unit tests for structured logging and log sanitizers."""

import json
import logging

import pytest

from vision_ocr.core.logging_config import (
    StructuredFormatter,
    configure_structured_logging,
)
from vision_ocr.core.logging_utils import (
    sanitize_operation_location,
    sanitize_subscription_key,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="vision_ocr.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="OCR job finished after %d checks",
        args=(3,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_base_fields(self):
        data = json.loads(StructuredFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "vision_ocr.test"
        assert data["message"] == "OCR job finished after 3 checks"
        assert data["timestamp"].endswith("Z")

    def test_whitelisted_extras_only(self):
        record = _record(operation_id="op-1", http_status=200, secret="nope")

        data = json.loads(StructuredFormatter().format(record))

        assert data["operation_id"] == "op-1"
        assert data["http_status"] == 200
        assert "secret" not in data

    def test_poll_fields(self):
        record = _record(poll_attempt=2, delay_seconds=0.075, job_status="Running")

        data = json.loads(StructuredFormatter().format(record))

        assert data["poll_attempt"] == 2
        assert data["delay_seconds"] == 0.075
        assert data["job_status"] == "Running"

    def test_exception_info(self):
        try:
            raise ValueError("bad body")
        except ValueError:
            import sys

            record = _record()
            record.exc_info = sys.exc_info()

        data = json.loads(StructuredFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad body"


def test_configure_structured_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_structured_logging(level="debug", json_format=False)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


class TestSanitizers:
    @pytest.mark.parametrize("key", [None, "", "short"])
    def test_short_keys_fully_masked(self, key):
        assert sanitize_subscription_key(key) == "***"

    def test_key_keeps_last_four(self):
        assert sanitize_subscription_key("0123456789abcdef") == "***cdef"

    def test_operation_id_from_location(self):
        location = "https://westus.api.cognitive.microsoft.com/vision/v2.0/read/operations/abc-123?sig=x"

        assert sanitize_operation_location(location) == "abc-123"

    def test_missing_location(self):
        assert sanitize_operation_location(None) == "N/A"


def test_configure_from_settings(monkeypatch):
    from vision_ocr.core import settings as settings_module
    from vision_ocr.core.logging_config import configure_logging_from_settings

    monkeypatch.setattr(settings_module.app_settings, "LOG_LEVEL", "WARNING")
    monkeypatch.setattr(settings_module.app_settings, "LOG_JSON", True)
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging_from_settings()

        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
