"""Structured logging configuration.

This module provides JSON-formatted logging for:
- Easy integration with log aggregation systems (ELK, Splunk, CloudWatch)
- Correlating submissions and status checks of one OCR job
- Machine-readable log output
"""

import json
import logging
from datetime import datetime, timezone

# Extra fields copied from logger calls into the JSON document.
# Anything else passed via extra={...} is dropped, so keys never leak.
STRUCTURED_FIELDS = (
    "service",  # always "vision" for this client
    "operation_id",  # last path segment of Operation-Location
    "http_status",
    "poll_attempt",  # 1-based status request counter
    "delay_seconds",  # wait before the next status request
    "duration_ms",
    "error_code",
    "job_status",  # value of the status field, e.g. Running / Succeeded
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs logs as JSON with standard fields plus any whitelisted extra
    context provided via the 'extra' parameter in logger calls.

    Example:
        >>> logger.info("OCR job accepted", extra={"operation_id": "abc"})
        # Output: {"timestamp": "2026-10-19T10:00:00Z", "level": "INFO",
        #          "message": "OCR job accepted", "operation_id": "abc", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string with log data
        """
        # UTC, naive ISO form with a Z suffix
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data = {
            "timestamp": created.replace(tzinfo=None).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Sync polls block a thread; the id tells concurrent jobs apart
        if record.process:
            log_data["process_id"] = record.process
        if record.thread:
            log_data["thread_id"] = record.thread

        # Job correlation fields from logger.info(..., extra={...})
        for key in STRUCTURED_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        # Transport failures are logged with exc_info=True
        if record.exc_info:
            exc_type, exc_value = record.exc_info[0], record.exc_info[1]
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


def configure_structured_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure logging for an application embedding the client.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatter (True) or plain text (False)
    """
    # Replaces whatever handlers the host installed
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler()

    if json_format:
        formatter = StructuredFormatter()
    else:
        # Plain lines for local runs
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    # httpx logs every status request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def configure_logging_from_settings() -> None:
    """Configure logging from LOG_LEVEL / LOG_JSON."""
    from vision_ocr.core.settings import app_settings

    configure_structured_logging(
        level=app_settings.LOG_LEVEL, json_format=app_settings.LOG_JSON
    )
