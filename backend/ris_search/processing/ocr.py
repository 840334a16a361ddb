"""
OCR Page Text
═════════════

OCR itself runs upstream; this module only turns a stored OCR result file
into the PageText sequence PageChunker consumes.

Page order is the order of `responses` inside the file, and across files
the order in which storage enumerates them. Nothing here sorts by
page_number.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from ris_search.core.errors import ReadError
from ris_search.schemas.ocr import OcrResultFile

logger = logging.getLogger(__name__)


@dataclass
class PageText:
    """
    Text recognised on a single page.

    page_number : 1-based page index as reported by the OCR job
    text        : full page text (may be empty for blank pages)
    """
    page_number: int
    text:        str

    @property
    def byte_length(self) -> int:
        return len(self.text.encode("utf-8"))


def parse_ocr_result(object_name: str, payload: bytes) -> list[PageText]:
    """
    Parse one OCR result file into pages.

    Raises:
        ReadError: payload is not valid OCR JSON.
    """
    try:
        result = OcrResultFile.model_validate_json(payload)
    except ValidationError as exc:
        raise ReadError(object_name, f"invalid OCR JSON ({exc.error_count()} errors)") from exc

    pages = [
        PageText(
            page_number=resp.context.page_number,
            text=resp.full_text_annotation.text,
        )
        for resp in result.responses
    ]
    logger.debug("OCR parsed | object=%s pages=%d", object_name, len(pages))
    return pages
