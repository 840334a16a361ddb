"""
OCR Result: Pydantic Wire Schema

OCR output files are written by the asynchronous document-text-detection
batch job, one JSON file per batch of pages:

    {
      "inputConfig": {...},
      "responses": [
        {
          "fullTextAnnotation": {"pages": [...], "text": "..."},
          "context": {"uri": "s3://.../doc.pdf", "pageNumber": 1}
        },
        ...
      ]
    }

Only the page number and the full page text are consumed. Blank pages come
back without `fullTextAnnotation` and map to empty text. Unknown fields are
ignored so upstream format additions do not break indexing.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _OcrModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class TextAnnotation(_OcrModel):
    text: str = ""


class ResponseContext(_OcrModel):
    uri:         str = ""
    page_number: int = 0


class PageResponse(_OcrModel):
    full_text_annotation: TextAnnotation  = Field(default_factory=TextAnnotation)
    context:              ResponseContext = Field(default_factory=ResponseContext)


class OcrResultFile(_OcrModel):
    """One OCR output object; `responses` are in page order as written."""
    responses: list[PageResponse] = Field(default_factory=list)
