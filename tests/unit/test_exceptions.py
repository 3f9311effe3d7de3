"""Unit tests for the exception hierarchy."""

from vision_ocr.core.exceptions import (
    BaseError,
    ErrorCategory,
    ExternalServiceError,
    OCRCancelledError,
    OCRMalformedResponseError,
    OCRPollTimeoutError,
    OCRTransportError,
    ValidationError,
)


class TestBaseError:
    def test_to_dict(self):
        error = BaseError(
            message="Something broke",
            error_code="SOMETHING_BROKE",
            category=ErrorCategory.SERVER_ERROR,
            http_status=500,
            details={"detail": "more"},
        )

        assert error.to_dict() == {
            "type": "/errors/SOMETHING_BROKE",
            "title": "Something broke",
            "status": 500,
            "code": "SOMETHING_BROKE",
            "detail": "more",
            "category": "server_error",
            "retryable": False,
        }
        assert str(error) == "Something broke"


class TestValidationError:
    def test_fields(self):
        error = ValidationError("Subscription key is required", field="subscription_key")

        assert error.http_status == 422
        assert error.error_code == "VALIDATION_ERROR"
        assert error.details["field"] == "subscription_key"
        assert error.retryable is False


class TestExternalServiceErrors:
    def test_transport_unavailable(self):
        error = OCRTransportError("unavailable", url="https://x/analyze", reason="refused")

        assert isinstance(error, ExternalServiceError)
        assert error.error_code == "VISION_UNAVAILABLE"
        assert error.http_status == 502
        assert error.retryable is True
        assert error.category == ErrorCategory.EXTERNAL_SERVICE
        assert error.details["url"] == "https://x/analyze"

    def test_transport_timeout(self):
        error = OCRTransportError("timeout", url="https://x/analyze", reason="slow")

        assert error.error_code == "VISION_TIMEOUT"
        assert error.http_status == 504

    def test_malformed_response(self):
        error = OCRMalformedResponseError("Status response is not valid JSON", body="<html>")

        assert error.error_code == "VISION_MALFORMED_RESPONSE"
        assert error.http_status == 502
        assert error.retryable is False
        assert error.to_dict()["detail"] == "Status response is not valid JSON"
        assert error.details["body"] == "<html>"

    def test_poll_timeout(self):
        error = OCRPollTimeoutError("op-1", attempts=4, elapsed_seconds=1.23456, last_status="Running")

        assert error.error_code == "VISION_POLL_TIMEOUT"
        assert error.http_status == 504
        assert error.details["elapsed_seconds"] == 1.235
        assert "Running" in error.message


def test_cancelled():
    error = OCRCancelledError("op-1", attempts=2)

    assert error.error_code == "OCR_CANCELLED"
    assert error.category == ErrorCategory.CANCELLED
    assert error.http_status == 499
    assert error.details == {"operation_id": "op-1", "attempts": 2}
