"""Unit tests for turning Read documents into page text."""

import json

from vision_ocr.clients.assembler import assemble_response
from vision_ocr.models.dto import OCRResponse, SubmissionOutcome, TerminalResponse
from vision_ocr.processors.read_result import extract_pages, extract_text

V2_DOCUMENT = {
    "status": "Succeeded",
    "recognitionResults": [
        {"page": 2, "lines": [{"text": "second page"}]},
        {"page": 1, "lines": [{"text": "Hello"}, {"text": "world"}]},
    ],
}

V3_DOCUMENT = {
    "status": "succeeded",
    "analyzeResult": {
        "readResults": [
            {"page": 1, "lines": [{"text": "Invoice"}, {"text": "Total 42"}]},
        ]
    },
}


def _finished(document: dict) -> OCRResponse:
    body = json.dumps(document)
    outcome = SubmissionOutcome(
        accepted=True, status_code=202, operation_location="https://x/operations/1"
    )
    terminal = TerminalResponse(body=body, status_code=200, document=document)
    return assemble_response(outcome, terminal)


class TestExtractPages:
    def test_v2_sorted_by_page(self):
        pages = extract_pages(V2_DOCUMENT)

        assert pages == [
            {"page_number": 1, "text": "Hello\nworld"},
            {"page_number": 2, "text": "second page"},
        ]

    def test_v3(self):
        assert extract_pages(V3_DOCUMENT) == [
            {"page_number": 1, "text": "Invoice\nTotal 42"}
        ]

    def test_missing_page_numbers_use_position(self):
        document = {"recognitionResults": [{"lines": [{"text": "a"}]}, {"lines": []}]}

        assert extract_pages(document) == [
            {"page_number": 1, "text": "a"},
            {"page_number": 2, "text": ""},
        ]

    def test_unknown_shapes(self):
        assert extract_pages({"status": "Failed"}) == []
        assert extract_pages([]) == []
        assert extract_pages({"recognitionResults": "nope"}) == []


class TestExtractText:
    def test_succeeded(self):
        response = _finished(V2_DOCUMENT)

        assert extract_text(response) == "Hello\nworld\n\nsecond page"

    def test_fallback_is_empty(self):
        response = assemble_response(SubmissionOutcome(accepted=False, status_code=400))

        assert extract_text(response) == ""

    def test_failed_job_is_empty(self):
        assert extract_text(_finished({"status": "Failed"})) == ""
