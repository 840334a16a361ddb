"""
Search Index: Abstract Base

Every concrete search-index backend implements this interface. The
indexing pipeline only speaks this protocol, so backends are swappable
without touching the publish protocol.

Publish contract:
  - delete_by(filter) removes every record matching a `field:"value"`
    filter expression. The pipeline only ever filters on
    `document.sourceFilename`.
  - save_objects(records) writes all records in one call. Object ids are
    deterministic (see record_id), so re-publishing the same document
    overwrites rather than duplicates.
  - Both raise IndexServiceError on failure. Neither retries.
"""

from __future__ import annotations

import re
import uuid
from abc import ABC, abstractmethod

from ris_search.core.errors import IndexServiceError
from ris_search.schemas.search import SearchRecord

SOURCE_FILENAME_FIELD = "document.sourceFilename"

_FILTER_RE = re.compile(r'^(?P<field>[A-Za-z_][\w.]*):"(?P<value>(?:[^"\\]|\\.)*)"$')
_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "ris-search/records")


# ---------------------------------------------------------------------------
# Filter expressions
# ---------------------------------------------------------------------------

def field_filter(field: str, value: str) -> str:
    """Build `field:"value"`, escaping quotes and backslashes in value."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'{field}:"{escaped}"'


def source_filename_filter(document_name: str) -> str:
    return field_filter(SOURCE_FILENAME_FIELD, document_name)


def parse_filter(expression: str) -> tuple[str, str]:
    """Split `field:"value"` back into (field, unescaped value)."""
    match = _FILTER_RE.match(expression.strip())
    if not match:
        raise IndexServiceError(f"Unsupported filter expression: {expression!r}")
    value = re.sub(r"\\(.)", r"\1", match.group("value"))
    return match.group("field"), value


def record_id(record: SearchRecord, index: int) -> str:
    """Stable object id: same document + same group position → same id."""
    return str(uuid.uuid5(_ID_NAMESPACE, f"{record.document.source_filename}#{index}"))


# ---------------------------------------------------------------------------
# Abstract interface
# ---------------------------------------------------------------------------

class SearchIndexBase(ABC):
    """Delete-by-filter + bulk-upsert search index."""

    @abstractmethod
    async def delete_by(self, filter_expression: str) -> int:
        """
        Delete every record matching `filter_expression`.
        Returns the number of records removed (0 if none matched).
        """

    @abstractmethod
    async def save_objects(self, records: list[SearchRecord]) -> int:
        """
        Insert or overwrite `records` in a single call.
        Returns the number of records written.
        """

    def close(self) -> None:
        """Release backend connections. No-op unless the backend holds any."""
