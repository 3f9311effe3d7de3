"""Exception hierarchy for the Vision OCR client.

All exceptions inherit from BaseError and carry structured error information
compatible with RFC 7807 Problem Details, so that a calling service can turn
them into HTTP responses without extra mapping.

A rejected submission is not an exception: it is reported through
``OCRResponse.use_default_parser``.
"""

from enum import Enum
from typing import Any, Optional

from vision_ocr.core.config import SERVICE_NAME


class ErrorCategory(str, Enum):
    """Error categories for classification and monitoring."""

    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    EXTERNAL_SERVICE = "external_service"
    VALIDATION = "validation"
    CANCELLED = "cancelled"


class BaseError(Exception):
    """Base exception for all Vision OCR errors.

    Attributes:
        message: Human-readable error message
        error_code: Application-specific error code
        category: Error category for classification
        http_status: HTTP status code a caller may map this error to
        details: Additional context (dict)
        retryable: Whether the whole invocation can be retried
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        http_status: int,
        details: Optional[dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.http_status = http_status
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to RFC 7807 Problem Details format.

        Returns:
            Dict containing standardized error information
        """
        return {
            "type": f"/errors/{self.error_code}",
            "title": self.message,
            "status": self.http_status,
            "code": self.error_code,
            "detail": self.details.get("detail"),
            "category": self.category.value,
            "retryable": self.retryable,
        }


class ClientError(BaseError):
    """Base for errors caused by the caller (4xx). Not retryable."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=kwargs.pop("category", ErrorCategory.CLIENT_ERROR),
            http_status=kwargs.pop("http_status", 400),
            retryable=False,
            **kwargs,
        )


class ValidationError(ClientError):
    """Input validation failed (422 Unprocessable Entity).

    Args:
        message: Validation error description
        field: Name of the argument or setting that failed validation
    """

    def __init__(self, message: str, field: str, **kwargs):
        additional_details = kwargs.pop("details", {})
        additional_details["field"] = field
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            category=ErrorCategory.VALIDATION,
            http_status=422,
            details=additional_details,
            **kwargs,
        )


class OCRCancelledError(ClientError):
    """The caller cancelled the invocation while it was waiting for the job.

    Args:
        operation_id: Identifier of the job that was being polled
        attempts: Number of status requests issued before cancellation
    """

    def __init__(self, operation_id: Optional[str], attempts: int):
        super().__init__(
            message="OCR polling cancelled",
            error_code="OCR_CANCELLED",
            category=ErrorCategory.CANCELLED,
            http_status=499,
            details={"operation_id": operation_id, "attempts": attempts},
        )


class ServerError(BaseError):
    """Base for server errors (5xx)."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=kwargs.pop("category", ErrorCategory.SERVER_ERROR),
            http_status=kwargs.pop("http_status", 500),
            retryable=kwargs.pop("retryable", False),
            **kwargs,
        )


class ExternalServiceError(ServerError):
    """External service failure (502 Bad Gateway / 504 Gateway Timeout).

    Args:
        service_name: Name of the external service
        error_type: Type of error ("timeout", "unavailable", "malformed_response",
            "poll_timeout")
        details: Additional error context
    """

    def __init__(self, service_name: str, error_type: str, **kwargs):
        if error_type in {"timeout", "poll_timeout"}:
            http_status = 504
        else:
            http_status = 502

        additional_details = kwargs.pop("details", {})
        additional_details.update(
            {
                "service": service_name,
                "error_type": error_type,
            }
        )

        super().__init__(
            message=kwargs.pop("message", f"{service_name} service {error_type}"),
            error_code=f"{service_name.upper()}_{error_type.upper()}",
            category=ErrorCategory.EXTERNAL_SERVICE,
            http_status=http_status,
            retryable=kwargs.pop("retryable", True),
            details=additional_details,
            **kwargs,
        )


class OCRTransportError(ExternalServiceError):
    """Network failure while talking to the OCR service.

    Args:
        error_type: "timeout" for httpx timeouts, "unavailable" otherwise
        url: Request URL (without credentials)
        reason: Text of the underlying transport exception
    """

    def __init__(self, error_type: str, url: str, reason: str):
        super().__init__(
            service_name=SERVICE_NAME,
            error_type=error_type,
            details={"url": url, "reason": reason},
        )


class OCRMalformedResponseError(ExternalServiceError):
    """The service answered with a body or headers that break the protocol.

    Raised when a status document is not a JSON object, when the status field
    disappears after the job was reported running, or when an accepted
    submission carries no job handle.
    """

    def __init__(self, reason: str, body: str = "", **kwargs):
        details = kwargs.pop("details", {})
        details.update({"detail": reason, "body": body})
        super().__init__(
            service_name=SERVICE_NAME,
            error_type="malformed_response",
            retryable=False,
            details=details,
            **kwargs,
        )


class OCRPollTimeoutError(ExternalServiceError):
    """The job was still running when the attempt or time budget ran out.

    Args:
        operation_id: Identifier of the job
        attempts: Number of status requests issued
        elapsed_seconds: Time spent polling
        last_status: Status value of the last status document
    """

    def __init__(
        self,
        operation_id: Optional[str],
        attempts: int,
        elapsed_seconds: float,
        last_status: Optional[str],
    ):
        super().__init__(
            service_name=SERVICE_NAME,
            error_type="poll_timeout",
            message=f"OCR job still {last_status} after {attempts} checks",
            details={
                "operation_id": operation_id,
                "attempts": attempts,
                "elapsed_seconds": round(elapsed_seconds, 3),
                "last_status": last_status,
            },
        )
