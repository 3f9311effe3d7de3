import logging
from typing import Optional

import pydantic

from vision_ocr.models.dto import (
    OCRResponse,
    ReadOperation,
    SubmissionOutcome,
    TerminalResponse,
)

logger = logging.getLogger(__name__)


def _read_operation(terminal: TerminalResponse) -> Optional[ReadOperation]:
    """Typed view of the terminal document, or None when its shape is unknown."""
    try:
        return terminal.operation
    except pydantic.ValidationError as e:
        logger.warning(
            "Terminal status document does not match the Read schema: %s",
            e,
            extra={
                "http_status": terminal.status_code,
                "poll_attempt": terminal.attempts,
            },
        )
        return None


def assemble_response(
    outcome: SubmissionOutcome, terminal: Optional[TerminalResponse] = None
) -> OCRResponse:
    """
    Build the caller-facing result from the submission and the last poll.

    A rejected submission yields a fallback result carrying the rejection
    status; an accepted one needs the terminal response of its job. The
    terminal body is passed through untouched even when it cannot be typed.
    """
    if not outcome.accepted:
        return OCRResponse(
            extracted_text="",
            status_code=outcome.status_code,
            use_default_parser=True,
        )

    if terminal is None:
        raise ValueError("accepted submission needs a terminal response")

    return OCRResponse(
        extracted_text=terminal.body,
        status_code=terminal.status_code,
        use_default_parser=False,
        operation=_read_operation(terminal),
        operation_location=outcome.operation_location,
    )
