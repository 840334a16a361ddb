from __future__ import annotations

import pytest

from ris_search.core.errors import ReadError
from ris_search.processing.ocr import PageText, parse_ocr_result
from tests.conftest import ocr_payload


@pytest.mark.unit
@pytest.mark.storage
class TestParseOcrResult:

    def test_pages_in_response_order(self):
        pages = parse_ocr_result("doc.pdfoutput-1-to-2.json", ocr_payload((2, "zwei"), (1, "eins")))

        assert pages == [PageText(2, "zwei"), PageText(1, "eins")]

    def test_missing_annotation_is_blank_page(self):
        payload = b'{"responses": [{"context": {"pageNumber": 4}}]}'
        pages = parse_ocr_result("x.json", payload)

        assert pages == [PageText(4, "")]

    def test_empty_file_has_no_pages(self):
        assert parse_ocr_result("x.json", b"{}") == []

    def test_invalid_json_raises_read_error(self):
        with pytest.raises(ReadError) as exc_info:
            parse_ocr_result("broken.json", b"{not json")
        assert exc_info.value.object_name == "broken.json"

    def test_byte_length_is_utf8(self):
        assert PageText(1, "Größe").byte_length == 7
