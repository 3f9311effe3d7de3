"""Client for the asynchronous Computer Vision Read OCR service."""

from vision_ocr.clients import (
    AsyncVisionReadClient,
    PollingPolicy,
    VisionReadClient,
    get_shared_client,
    recognize,
    recognize_async,
)
from vision_ocr.core.exceptions import (
    BaseError,
    OCRCancelledError,
    OCRMalformedResponseError,
    OCRPollTimeoutError,
    OCRTransportError,
)
from vision_ocr.models.dto import (
    OCRResponse,
    ReadOperation,
    SubmissionOutcome,
    TerminalResponse,
)
from vision_ocr.processors.read_result import extract_pages, extract_text

__version__ = "0.1.0"

__all__ = [
    "AsyncVisionReadClient",
    "BaseError",
    "OCRCancelledError",
    "OCRMalformedResponseError",
    "OCRPollTimeoutError",
    "OCRResponse",
    "OCRTransportError",
    "PollingPolicy",
    "ReadOperation",
    "SubmissionOutcome",
    "TerminalResponse",
    "VisionReadClient",
    "extract_pages",
    "extract_text",
    "get_shared_client",
    "recognize",
    "recognize_async",
]
