"""
Typed contracts exchanged between the submitter, the poller and callers.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from vision_ocr.core.config import RUNNING_STATUS, SUCCEEDED_STATUS


class SubmissionOutcome(BaseModel):
    """
    Result of the analyze request.

    ``accepted`` is only true for a 202 carrying a job handle; any other
    status is a synchronous rejection.
    """

    model_config = ConfigDict(frozen=True)

    accepted: bool
    status_code: int
    operation_location: str | None = None

    @model_validator(mode="after")
    def _accepted_has_location(self) -> "SubmissionOutcome":
        if self.accepted and not self.operation_location:
            raise ValueError("accepted submission requires operation_location")
        return self


class ReadOperation(BaseModel):
    """
    Status document of a Read job.

    Known fields are typed; anything else the service sends is kept in
    ``model_extra`` so newer response shapes survive a round trip.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    status: str | None = None
    created_date_time: str | None = Field(default=None, alias="createdDateTime")
    last_updated_date_time: str | None = Field(
        default=None, alias="lastUpdatedDateTime"
    )
    recognition_results: list[dict[str, Any]] | None = Field(
        default=None, alias="recognitionResults"
    )
    analyze_result: dict[str, Any] | None = Field(default=None, alias="analyzeResult")

    @field_validator("status", mode="before")
    @classmethod
    def _status_as_text(cls, value: Any) -> Any:
        # Same coercion as the poller applies when deciding on "Running"
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @property
    def is_running(self) -> bool:
        return self.status == RUNNING_STATUS

    @property
    def succeeded(self) -> bool:
        return (self.status or "").lower() == SUCCEEDED_STATUS.lower()

    @property
    def residual(self) -> dict[str, Any]:
        """Fields not modelled above."""
        return dict(self.model_extra or {})


class TerminalResponse(BaseModel):
    """
    Last status document of a finished job.

    ``body`` is the raw text as received; ``document`` is its parsed form.
    """

    model_config = ConfigDict(frozen=True)

    body: str
    status_code: int
    document: dict[str, Any] = Field(default_factory=dict)
    attempts: int = 1

    @property
    def operation(self) -> ReadOperation:
        return ReadOperation.model_validate(self.document)


class OCRResponse(BaseModel):
    """
    Unified outcome of one OCR invocation.

    Exactly one of these holds: the job reached a terminal state
    (``use_default_parser`` is False and ``extracted_text`` holds the final
    status document), or the service rejected the submission
    (``use_default_parser`` is True and ``extracted_text`` is empty).
    """

    model_config = ConfigDict(frozen=True)

    extracted_text: str = ""
    status_code: int = 0
    use_default_parser: bool = False
    extensions: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    operation: ReadOperation | None = None
    operation_location: str | None = None

    @field_validator("extensions", mode="after")
    @classmethod
    def _read_only_extensions(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    def with_extension(self, key: str, value: Any) -> "OCRResponse":
        """Return a copy carrying one more extension field."""
        # model_copy skips validation, so wrap the new mapping here
        extensions = MappingProxyType({**self.extensions, key: value})
        return self.model_copy(update={"extensions": extensions})

    def json_document(self) -> dict[str, Any]:
        """Parse ``extracted_text``; empty dict for fallback results."""
        if not self.extracted_text:
            return {}
        return json.loads(self.extracted_text)
