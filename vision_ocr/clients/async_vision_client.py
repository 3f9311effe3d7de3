import asyncio
import logging
from typing import Optional

import httpx

from vision_ocr.clients.assembler import assemble_response
from vision_ocr.clients.polling import PollingPolicy
from vision_ocr.clients.protocol import (
    AsyncDocument,
    async_request_content,
    interpret_submission,
    parse_status_document,
    status_headers,
    submission_headers,
    transport_error,
)
from vision_ocr.clients.vision_client import resolve_subscription_key
from vision_ocr.core.config import HTTP_ACCEPTED, SERVICE_NAME
from vision_ocr.core.exceptions import OCRPollTimeoutError
from vision_ocr.core.logging_utils import (
    sanitize_operation_location,
    sanitize_subscription_key,
)
from vision_ocr.core.settings import vision_settings
from vision_ocr.models.dto import OCRResponse, SubmissionOutcome, TerminalResponse

logger = logging.getLogger(__name__)


class AsyncVisionReadClient:
    """asyncio flavour of VisionReadClient.

    Cancelling the task that runs ``poll`` or ``analyze`` interrupts the
    pending sleep or request and propagates ``asyncio.CancelledError``.
    """

    def __init__(
        self,
        analyze_url: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        verify: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        polling: Optional[PollingPolicy] = None,
    ):
        self.analyze_url = analyze_url or vision_settings.VISION_ANALYZE_URL
        self.polling = polling or PollingPolicy.from_settings()
        self.timeout = timeout or vision_settings.VISION_CLIENT_TIMEOUT_SECONDS
        self.verify = vision_settings.VISION_VERIFY_SSL if verify is None else verify
        self.transport = transport
        self._owns_client = http_client is None
        self._client: Optional[httpx.AsyncClient] = http_client

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, verify=self.verify, transport=self.transport
            )
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client not started")
        return self._client

    async def submit(
        self, document: AsyncDocument, subscription_key: str
    ) -> SubmissionOutcome:
        client = self._http()
        headers = submission_headers(subscription_key)
        content = async_request_content(document)
        logger.debug(
            "Submitting document to %s, key=%s",
            self.analyze_url,
            sanitize_subscription_key(subscription_key),
        )
        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            async with client.stream(
                "POST", self.analyze_url, content=content, headers=headers
            ) as response:
                preview = ""
                if response.status_code != HTTP_ACCEPTED:
                    preview = (await response.aread()).decode(
                        "utf-8", errors="replace"
                    )
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
                "duration_ms": round((loop.time() - started) * 1000, 1),
            },
        )
        return outcome

    async def poll(
        self, operation_location: str, subscription_key: str
    ) -> TerminalResponse:
        """Poll with backoff until the job leaves the running set."""
        client = self._http()
        headers = status_headers(subscription_key)
        operation_id = sanitize_operation_location(operation_location)
        policy = self.polling
        loop = asyncio.get_running_loop()
        started = loop.time()
        attempts = 0
        saw_running = False

        while True:
            attempts += 1
            try:
                async with client.stream(
                    "GET", operation_location, headers=headers
                ) as response:
                    await response.aread()
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

            elapsed = loop.time() - started
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
            await asyncio.sleep(delay)

    async def analyze(
        self, document: AsyncDocument, subscription_key: str
    ) -> OCRResponse:
        outcome = await self.submit(document, subscription_key)
        if not outcome.accepted:
            return assemble_response(outcome)
        terminal = await self.poll(outcome.operation_location, subscription_key)
        return assemble_response(outcome, terminal)


async def recognize_async(
    document: AsyncDocument,
    subscription_key: Optional[str] = None,
    *,
    client: Optional[AsyncVisionReadClient] = None,
    analyze_url: Optional[str] = None,
    polling: Optional[PollingPolicy] = None,
) -> OCRResponse:
    """
    Run OCR on one document from async code.

    Uses ``client`` when given (it must already be entered); otherwise opens a
    client for this call only.
    """
    key = resolve_subscription_key(subscription_key)
    if client is not None:
        return await client.analyze(document, key)

    async with AsyncVisionReadClient(analyze_url=analyze_url, polling=polling) as own:
        return await own.analyze(document, key)
