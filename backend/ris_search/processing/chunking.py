"""
Page Chunker: Size-Bounded Page Groups
═════════════════════════════════════════

Search records have a payload ceiling, so a document's OCR pages are packed
into groups of roughly `threshold_bytes` UTF-8 bytes each. Pages are never
split: a group holds whole pages, in enumeration order.

Packing rule
────────────
  A running byte counter belongs to the current group and starts at 0.
  For each incoming page:

    1. counter += utf8_len(page.text)
    2. if counter > threshold:
           open a fresh empty group, counter = 0
    3. append the page to the current group

  The page that crosses the threshold therefore opens the next group, and
  its own bytes are not counted against that group. The threshold is a soft
  cap checked after each page, not a pre-check.

  Consequences kept on purpose:
    • A document with no pages yields exactly one empty group, so every
      document publishes at least one search record.
    • A first page larger than the threshold leaves group 0 empty.

Example (threshold 10_500):
  pages of 6_000 + 6_000 bytes  →  [[p1], [p2]]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ris_search.processing.ocr import PageText

logger = logging.getLogger(__name__)

# Default payload budget per search record
DEFAULT_THRESHOLD_BYTES = 10_500


@dataclass
class ChunkGroup:
    """Ordered pages destined for one search record."""
    pages: list[PageText] = field(default_factory=list)

    @property
    def byte_length(self) -> int:
        return sum(p.byte_length for p in self.pages)


class PageChunker:
    """
    Incremental packer; feed pages as storage enumerates them.

    Usage::

        chunker = PageChunker(threshold_bytes=settings.chunk_threshold_bytes)
        for name in object_names:
            chunker.add_pages(pages_for(name))
        total, groups = chunker.result()
    """

    def __init__(self, threshold_bytes: int = DEFAULT_THRESHOLD_BYTES) -> None:
        if threshold_bytes <= 0:
            raise ValueError(f"threshold_bytes must be positive, got {threshold_bytes}")
        self._threshold = threshold_bytes
        self._groups: list[ChunkGroup] = [ChunkGroup()]
        self._counter = self._groups[-1].byte_length
        self._total_pages = 0

    @property
    def total_pages(self) -> int:
        return self._total_pages

    def add_page(self, page: PageText) -> None:
        self._counter += page.byte_length
        if self._counter > self._threshold:
            self._groups.append(ChunkGroup())
            self._counter = 0
        self._groups[-1].pages.append(page)
        self._total_pages += 1

    def add_pages(self, pages: Iterable[PageText]) -> int:
        """Append pages in order; returns how many were added."""
        added = 0
        for page in pages:
            self.add_page(page)
            added += 1
        return added

    def result(self) -> tuple[int, list[ChunkGroup]]:
        logger.debug(
            "Chunked | pages=%d groups=%d threshold=%d",
            self._total_pages, len(self._groups), self._threshold,
        )
        return self._total_pages, self._groups


def chunk_pages(
    pages: Iterable[PageText],
    threshold_bytes: int = DEFAULT_THRESHOLD_BYTES,
) -> tuple[int, list[ChunkGroup]]:
    """One-shot form of PageChunker: returns (total_page_count, groups)."""
    chunker = PageChunker(threshold_bytes=threshold_bytes)
    chunker.add_pages(pages)
    return chunker.result()
