from __future__ import annotations

from typing import Any

from vision_ocr.models.dto import OCRResponse


def _lines_text(page: dict) -> str:
    lines = page.get("lines")
    if not isinstance(lines, list):
        return ""
    return "\n".join(
        line.get("text", "") or ""
        for line in lines
        if isinstance(line, dict) and line.get("text")
    )


def extract_pages(document: Any) -> list[dict]:
    """Parse a terminal Read document into normalized pages.

    Handles both Read response formats:
    - v2 {recognitionResults: [{page, lines: [{text}]}]}
    - v3 {analyzeResult: {readResults: [{page, lines: [{text}]}]}}
    - Anything else yields an empty list

    Returns:
        List of dicts with 'page_number' and 'text' keys
    """
    if not isinstance(document, dict):
        return []

    results = document.get("recognitionResults")
    if not isinstance(results, list):
        analyze = document.get("analyzeResult")
        results = analyze.get("readResults") if isinstance(analyze, dict) else None
    if not isinstance(results, list):
        return []

    pages = []
    for idx, page_data in enumerate(results, start=1):
        if not isinstance(page_data, dict):
            continue
        page_number = page_data.get("page")
        try:
            page_number = int(page_number) if page_number is not None else idx
        except (TypeError, ValueError):
            page_number = idx
        pages.append({"page_number": page_number, "text": _lines_text(page_data)})

    pages.sort(key=lambda x: x["page_number"])
    return pages


def extract_text(response: OCRResponse) -> str:
    """
    Join the page texts of a finished job.

    Returns "" for fallback results and jobs that did not succeed, so the
    caller can route to its default extractor.
    """
    if response.use_default_parser or response.operation is None:
        return ""
    if not response.operation.succeeded:
        return ""

    pages = extract_pages(response.json_document())
    return "\n\n".join(p["text"] for p in pages if p["text"])
