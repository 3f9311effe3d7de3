"""Transport-independent rules of the submit/poll protocol.

Shared by the blocking and the asyncio client so both interpret the service
the same way: which headers go out, what a 202 means, when a status document
is still running and when it is malformed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from typing import IO, Any, Optional, Union
from urllib.parse import urlsplit

import httpx

from vision_ocr.clients.polling import PollingPolicy
from vision_ocr.core.config import (
    APPLICATION_JSON,
    ERROR_BODY_MAX_CHARS,
    HTTP_ACCEPTED,
    OCTET_STREAM,
    OPERATION_LOCATION_HEADER,
    SERVICE_NAME,
    STATUS_FIELD,
    STREAM_CHUNK_SIZE,
    SUBSCRIPTION_KEY_HEADER,
)
from vision_ocr.core.exceptions import (
    OCRMalformedResponseError,
    OCRTransportError,
    ValidationError,
)
from vision_ocr.models.dto import SubmissionOutcome

logger = logging.getLogger(__name__)

Document = Union[bytes, bytearray, IO[bytes], Iterable[bytes]]
AsyncDocument = Union[Document, AsyncIterable[bytes]]


def submission_headers(subscription_key: str) -> dict[str, str]:
    _require_key(subscription_key)
    return {
        SUBSCRIPTION_KEY_HEADER: subscription_key,
        "Content-Type": OCTET_STREAM,
    }


def status_headers(subscription_key: str) -> dict[str, str]:
    _require_key(subscription_key)
    return {
        SUBSCRIPTION_KEY_HEADER: subscription_key,
        "Content-Type": APPLICATION_JSON,
        "Accept": APPLICATION_JSON,
    }


def _require_key(subscription_key: str) -> None:
    if not subscription_key:
        raise ValidationError("Subscription key is required", field="subscription_key")


def _read_chunks(stream: IO[bytes], chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield chunk


def request_content(
    document: Document, chunk_size: int = STREAM_CHUNK_SIZE
) -> Union[bytes, Iterator[bytes]]:
    """Turn a document into an httpx request body.

    In-memory bytes are sent as is. File objects and chunk iterables become a
    generator, which httpx sends with chunked transfer encoding, so the total
    length is never needed.
    """
    if isinstance(document, str):
        raise ValidationError("Document must be binary, got str", field="document")
    if isinstance(document, (bytes, bytearray)):
        return bytes(document)
    if hasattr(document, "read"):
        return _read_chunks(document, chunk_size)
    if isinstance(document, Iterable):
        return iter(document)
    raise ValidationError(
        f"Unsupported document type: {type(document).__name__}", field="document"
    )


async def _aread_chunks(
    document: Union[IO[bytes], Iterable[bytes], AsyncIterable[bytes]],
    chunk_size: int,
) -> AsyncIterator[bytes]:
    if isinstance(document, AsyncIterable):
        async for chunk in document:
            yield chunk
    elif hasattr(document, "read"):
        # Blocking file reads run in a worker thread, off the event loop
        while True:
            chunk = await asyncio.to_thread(document.read, chunk_size)
            if not chunk:
                return
            yield chunk
    else:
        for chunk in document:
            yield chunk


def async_request_content(
    document: AsyncDocument, chunk_size: int = STREAM_CHUNK_SIZE
) -> Union[bytes, AsyncIterator[bytes]]:
    """Async counterpart of request_content; httpx.AsyncClient needs async streams.

    Async iterables are the natural input. Plain chunk iterables are drained
    on the loop, so they should not block; binary file objects are read in a
    worker thread.
    """
    if isinstance(document, str):
        raise ValidationError("Document must be binary, got str", field="document")
    if isinstance(document, (bytes, bytearray)):
        return bytes(document)
    if (
        isinstance(document, AsyncIterable)
        or hasattr(document, "read")
        or isinstance(document, Iterable)
    ):
        return _aread_chunks(document, chunk_size)
    raise ValidationError(
        f"Unsupported document type: {type(document).__name__}", field="document"
    )


def interpret_submission(
    status_code: int, headers: httpx.Headers, body_preview: str = ""
) -> SubmissionOutcome:
    """
    Decide between the asynchronous path and a synchronous rejection.

    Raises:
        OCRMalformedResponseError: On a 202 without a job handle.
    """
    if status_code != HTTP_ACCEPTED:
        # 400/415/500/503: bad argument, unsupported format, invalid size ...
        logger.warning(
            "OCR submission rejected, falling back to default parser",
            extra={
                "http_status": status_code,
                "service": SERVICE_NAME,
            },
        )
        if body_preview:
            logger.debug("Rejection body: %s", body_preview[:ERROR_BODY_MAX_CHARS])
        return SubmissionOutcome(accepted=False, status_code=status_code)

    location = headers.get(OPERATION_LOCATION_HEADER)
    if not location:
        raise OCRMalformedResponseError(
            f"Accepted submission has no {OPERATION_LOCATION_HEADER} header"
        )
    return SubmissionOutcome(
        accepted=True, status_code=status_code, operation_location=location
    )


def parse_status_document(
    body: str, saw_running: bool, policy: PollingPolicy
) -> tuple[dict[str, Any], Optional[str], bool]:
    """
    Parse one status body.

    Returns:
        (document, status, running)

    Raises:
        OCRMalformedResponseError: When the body is not a JSON object, or the
            status field is missing after the job was reported running.
    """
    preview = body[:ERROR_BODY_MAX_CHARS]
    try:
        document = json.loads(body)
    except json.JSONDecodeError as e:
        raise OCRMalformedResponseError(
            f"Status response is not valid JSON: {e.msg}", body=preview
        ) from e

    if not isinstance(document, dict):
        raise OCRMalformedResponseError(
            f"Status response is a JSON {type(document).__name__}, expected object",
            body=preview,
        )

    status = document.get(STATUS_FIELD)
    if status is None and saw_running:
        raise OCRMalformedResponseError(
            "Status field missing after job was reported running", body=preview
        )
    if status is not None and not isinstance(status, str):
        status = str(status)

    return document, status, policy.is_running(status)


def transport_error(exc: httpx.TransportError, url: str) -> OCRTransportError:
    """Map an httpx transport failure onto the client's error taxonomy."""
    error_type = "timeout" if isinstance(exc, httpx.TimeoutException) else "unavailable"
    return OCRTransportError(
        error_type=error_type,
        url=urlsplit(str(url))._replace(query="").geturl(),
        reason=f"{type(exc).__name__}: {exc}",
    )
