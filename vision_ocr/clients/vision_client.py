"""Blocking client for the Computer Vision Read (Batch Read File) API.

Flow of one invocation:
    POST document  -> 202 + Operation-Location  (job accepted)
                   -> anything else             (fallback to default parser)
    GET  location  -> {"status": "Running"}     (wait, ask again)
                   -> {"status": <other>, ...}  (terminal, returned as is)

The httpx client is meant to be shared: pass one in, or let the OCR client
build and own one.
"""

from __future__ import annotations

import logging
import threading
import time
from functools import lru_cache
from typing import Optional

import httpx

from vision_ocr.clients.assembler import assemble_response
from vision_ocr.clients.polling import PollingPolicy
from vision_ocr.clients.protocol import (
    Document,
    interpret_submission,
    parse_status_document,
    request_content,
    status_headers,
    submission_headers,
    transport_error,
)
from vision_ocr.core.config import HTTP_ACCEPTED, SERVICE_NAME
from vision_ocr.core.exceptions import (
    OCRCancelledError,
    OCRPollTimeoutError,
    ValidationError,
)
from vision_ocr.core.logging_utils import (
    sanitize_operation_location,
    sanitize_subscription_key,
)
from vision_ocr.core.settings import vision_settings
from vision_ocr.models.dto import OCRResponse, SubmissionOutcome, TerminalResponse

logger = logging.getLogger(__name__)


class VisionReadClient:
    """Submit documents to the Read API and poll their jobs.

    Args:
        analyze_url: Analyze endpoint; defaults to VISION_ANALYZE_URL
        http_client: Shared httpx.Client; not closed by this object
        timeout: Per-request timeout when building an own client
        verify: TLS verification when building an own client
        transport: Custom httpx transport when building an own client
        polling: Polling policy; defaults to VISION_POLL_* settings
    """

    def __init__(
        self,
        analyze_url: Optional[str] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        verify: Optional[bool] = None,
        transport: Optional[httpx.BaseTransport] = None,
        polling: Optional[PollingPolicy] = None,
    ) -> None:
        self.analyze_url = analyze_url or vision_settings.VISION_ANALYZE_URL
        self.polling = polling or PollingPolicy.from_settings()
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(
                timeout=timeout or vision_settings.VISION_CLIENT_TIMEOUT_SECONDS,
                verify=vision_settings.VISION_VERIFY_SSL if verify is None else verify,
                transport=transport,
            )
        self._client = http_client

    def __enter__(self) -> "VisionReadClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def submit(self, document: Document, subscription_key: str) -> SubmissionOutcome:
        """
        Send the document to the analyze endpoint.

        Returns:
            SubmissionOutcome; a non-202 answer is a rejection, not an error.

        Raises:
            OCRTransportError: Network failure while sending or reading headers.
            OCRMalformedResponseError: 202 without Operation-Location.
        """
        headers = submission_headers(subscription_key)
        content = request_content(document)
        logger.debug(
            "Submitting document to %s, key=%s",
            self.analyze_url,
            sanitize_subscription_key(subscription_key),
        )
        started = time.perf_counter()
        try:
            with self._client.stream(
                "POST", self.analyze_url, content=content, headers=headers
            ) as response:
                preview = ""
                if response.status_code != HTTP_ACCEPTED:
                    preview = response.read().decode("utf-8", errors="replace")
                outcome = interpret_submission(
                    response.status_code, response.headers, preview
                )
        except httpx.TransportError as e:
            logger.error(
                "OCR submission failed: %s",
                e,
                extra={"service": SERVICE_NAME},
                exc_info=True,
            )
            raise transport_error(e, self.analyze_url) from e

        logger.info(
            "OCR submission answered",
            extra={
                "service": SERVICE_NAME,
                "http_status": outcome.status_code,
                "operation_id": sanitize_operation_location(
                    outcome.operation_location
                ),
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        return outcome

    def poll(
        self,
        operation_location: str,
        subscription_key: str,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> TerminalResponse:
        """
        Poll the job until its status leaves the running set.

        Args:
            operation_location: Job handle from the submission
            subscription_key: API credential
            cancel_event: Setting it aborts the loop at the next wait

        Raises:
            OCRMalformedResponseError: Unparseable status document.
            OCRPollTimeoutError: Attempts or deadline exhausted.
            OCRCancelledError: cancel_event was set.
            OCRTransportError: Network failure on a status request.
        """
        headers = status_headers(subscription_key)
        operation_id = sanitize_operation_location(operation_location)
        policy = self.polling
        started = time.monotonic()
        attempts = 0
        saw_running = False
        status: Optional[str] = None

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise OCRCancelledError(operation_id, attempts)

            attempts += 1
            try:
                # Body is read and released before any wait
                with self._client.stream(
                    "GET", operation_location, headers=headers
                ) as response:
                    response.read()
                    body = response.text
                    status_code = response.status_code
            except httpx.TransportError as e:
                logger.error(
                    "OCR status request failed: %s",
                    e,
                    extra={"operation_id": operation_id, "poll_attempt": attempts},
                    exc_info=True,
                )
                raise transport_error(e, operation_location) from e

            document, status, running = parse_status_document(
                body, saw_running, policy
            )
            if not running:
                logger.info(
                    "OCR job finished after %d checks",
                    attempts,
                    extra={
                        "service": SERVICE_NAME,
                        "operation_id": operation_id,
                        "http_status": status_code,
                        "job_status": status,
                        "poll_attempt": attempts,
                    },
                )
                return TerminalResponse(
                    body=body,
                    status_code=status_code,
                    document=document,
                    attempts=attempts,
                )
            saw_running = True

            elapsed = time.monotonic() - started
            remaining = policy.remaining(elapsed)
            if policy.attempts_exhausted(attempts) or (
                remaining is not None and remaining <= 0
            ):
                logger.warning(
                    "OCR job still running after %d checks, giving up",
                    attempts,
                    extra={"operation_id": operation_id, "job_status": status},
                )
                raise OCRPollTimeoutError(operation_id, attempts, elapsed, status)

            delay = policy.delay_for(attempts - 1)
            if remaining is not None:
                delay = min(delay, remaining)
            logger.debug(
                "OCR job running, next check in %.3fs",
                delay,
                extra={
                    "operation_id": operation_id,
                    "poll_attempt": attempts,
                    "delay_seconds": delay,
                },
            )
            if cancel_event is not None:
                if cancel_event.wait(delay):
                    logger.info(
                        "OCR polling cancelled",
                        extra={"operation_id": operation_id, "poll_attempt": attempts},
                    )
                    raise OCRCancelledError(operation_id, attempts)
            else:
                time.sleep(delay)

    def analyze(
        self,
        document: Document,
        subscription_key: str,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> OCRResponse:
        """Submit, poll to completion and assemble the OCRResponse."""
        outcome = self.submit(document, subscription_key)
        if not outcome.accepted:
            return assemble_response(outcome)
        terminal = self.poll(
            outcome.operation_location, subscription_key, cancel_event=cancel_event
        )
        return assemble_response(outcome, terminal)


@lru_cache(maxsize=1)
def get_shared_client() -> VisionReadClient:
    """Process-wide client built from settings, created on first use."""
    return VisionReadClient()


def resolve_subscription_key(subscription_key: Optional[str]) -> str:
    key = subscription_key or vision_settings.subscription_key
    if not key:
        raise ValidationError(
            "No subscription key given and VISION_SUBSCRIPTION_KEY is not set",
            field="subscription_key",
        )
    return key


def recognize(
    document: Document,
    subscription_key: Optional[str] = None,
    *,
    client: Optional[VisionReadClient] = None,
    cancel_event: Optional[threading.Event] = None,
) -> OCRResponse:
    """
    Run OCR on one document.

    Args:
        document: Bytes, a binary file object or an iterable of byte chunks
        subscription_key: API credential; defaults to VISION_SUBSCRIPTION_KEY
        client: Client to use instead of the shared one
        cancel_event: Setting it aborts polling

    Returns:
        OCRResponse; check use_default_parser before reading extracted_text.
    """
    key = resolve_subscription_key(subscription_key)
    client = client or get_shared_client()
    return client.analyze(document, key, cancel_event=cancel_event)
