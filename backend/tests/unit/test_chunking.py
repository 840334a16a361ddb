"""
Unit Tests: PageChunker
═════════════════════════
"""

from __future__ import annotations

import pytest

from ris_search.processing.chunking import PageChunker, chunk_pages
from ris_search.processing.ocr import PageText


def _page(number: int, size: int, char: str = "x") -> PageText:
    return PageText(page_number=number, text=char * size)


@pytest.mark.unit
@pytest.mark.chunking
class TestPageChunker:

    def test_two_large_pages_split(self):
        total, groups = chunk_pages([_page(1, 6000), _page(2, 6000)], threshold_bytes=10_500)

        assert total == 2
        assert [[p.page_number for p in g.pages] for g in groups] == [[1], [2]]

    def test_zero_pages_give_one_empty_group(self):
        total, groups = chunk_pages([])

        assert total == 0
        assert len(groups) == 1
        assert groups[0].pages == []

    def test_small_pages_share_a_group(self):
        total, groups = chunk_pages([_page(i, 100) for i in range(1, 6)])

        assert total == 5
        assert len(groups) == 1
        assert groups[0].byte_length == 500

    def test_threshold_reached_exactly_does_not_split(self):
        _, groups = chunk_pages([_page(1, 50), _page(2, 50)], threshold_bytes=100)
        assert len(groups) == 1

    def test_crossing_page_bytes_not_carried_over(self):
        # counter after p2 resets to 0, so p3 + p4 (80 bytes) still fit
        _, groups = chunk_pages(
            [_page(1, 60), _page(2, 60), _page(3, 40), _page(4, 40)],
            threshold_bytes=100,
        )
        assert [[p.page_number for p in g.pages] for g in groups] == [[1], [2, 3, 4]]

    def test_oversized_first_page_leaves_first_group_empty(self):
        _, groups = chunk_pages([_page(1, 20_000)], threshold_bytes=10_500)

        assert len(groups) == 2
        assert groups[0].pages == []
        assert groups[1].pages[0].page_number == 1

    def test_bytes_counted_as_utf8(self):
        # "ä" is two bytes; 60 chars = 120 bytes crosses 100
        _, groups = chunk_pages([_page(1, 60, "ä")], threshold_bytes=100)
        assert len(groups) == 2

    def test_enumeration_order_kept(self):
        pages = [_page(3, 10), _page(1, 10), _page(2, 10)]
        _, groups = chunk_pages(pages)
        assert [p.page_number for p in groups[0].pages] == [3, 1, 2]

    def test_incremental_matches_one_shot(self):
        pages = [_page(i, 4000) for i in range(1, 8)]
        chunker = PageChunker(threshold_bytes=10_500)
        assert chunker.add_pages(pages[:3]) == 3
        for page in pages[3:]:
            chunker.add_page(page)

        assert chunker.result() == chunk_pages(pages, threshold_bytes=10_500)
        assert chunker.total_pages == 7

    def test_non_positive_threshold_rejected(self):
        with pytest.raises(ValueError):
            PageChunker(threshold_bytes=0)
