"""
Indexing error hierarchy.

Every failure raised by the core derives from IndexingError. The pipeline
stamps `document_name` and `stage` onto the exception before re-raising so
the caller of update_search_for_document can log and alert without parsing
messages.

Fatal (abort the run):
  UnrecognizedNameError   composite name matches no hierarchy marker
  RecordNotFoundError     record store returned nothing for a key
  StoreError              record store access failed
  EnumerationError        OCR-result listing failed
  IndexServiceError       search index delete / upsert failed

Non-fatal:
  ReadError               one OCR-result object could not be read; skipped
"""

from __future__ import annotations


class IndexingError(Exception):
    """Base class; carries the document and pipeline stage once known."""

    def __init__(self, message: str, *, document_name: str | None = None) -> None:
        super().__init__(message)
        self.document_name = document_name
        self.stage: str | None = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.document_name is None and self.stage is None:
            return base
        return f"{base} [doc={self.document_name} stage={self.stage}]"


class UnrecognizedNameError(IndexingError):
    """A composite document name could not be decomposed into a hierarchy key."""

    def __init__(self, name: str, reason: str = "no hierarchy marker matches") -> None:
        super().__init__(f"Unrecognized name {name!r}: {reason}")
        self.name = name


class RecordNotFoundError(IndexingError):
    """The record store has no entity for the requested key."""

    def __init__(self, kind: str, key_path: str) -> None:
        super().__init__(f"{kind} record not found: {key_path}")
        self.kind = kind
        self.key_path = key_path


class StoreError(IndexingError):
    """Lower-level record-store failure (connection, SQL, mapping)."""


class EnumerationError(IndexingError):
    """Listing OCR-result objects failed; the scan cannot continue."""


class ReadError(IndexingError):
    """A single OCR-result object could not be fetched or parsed."""

    def __init__(self, object_name: str, reason: str) -> None:
        super().__init__(f"Cannot read OCR result {object_name}: {reason}")
        self.object_name = object_name


class IndexServiceError(IndexingError):
    """The search index rejected a delete or upsert call."""
