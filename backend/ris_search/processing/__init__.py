"""
Document Processing Package
════════════════════════════

The pure core of the indexer:

  Composite name → HierarchyKey        OCR result → PageText → ChunkGroup
                         ↓
                 HierarchyEntity + RelatedRecords

Modules
───────
  keys.py        KeyResolver: composite document name → parent-chained key
  ocr.py         Stored OCR JSON → ordered PageText list
  chunking.py    PageChunker: byte-bounded page grouping
  enrichment.py  HierarchyEnricher: owning entity + related agenda items

Nothing here opens connections; the record store is injected into
HierarchyEnricher and everything else is plain data.
"""

from ris_search.processing.keys import HierarchyKey, HierarchyKind, KeyMarkers, KeyResolver
from ris_search.processing.ocr import PageText, parse_ocr_result
from ris_search.processing.chunking import ChunkGroup, PageChunker, chunk_pages
from ris_search.processing.enrichment import HierarchyEnricher

__all__ = [
    "HierarchyKey",
    "HierarchyKind",
    "KeyMarkers",
    "KeyResolver",
    "PageText",
    "parse_ocr_result",
    "ChunkGroup",
    "PageChunker",
    "chunk_pages",
    "HierarchyEnricher",
]
