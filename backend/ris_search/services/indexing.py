"""
Document Indexing Service

Re-publishes one OCR'd RIS document into the search index:
  1. DELETE_OLD      remove every record whose document.sourceFilename is the name
  2. LIST_AND_CHUNK  list OCR result objects under the name, feed pages to PageChunker
  3. ENRICH          resolve the hierarchy key, enrich the owning entity once,
                     fetch the attachment title
  4. PUBLISH_NEW     one save_objects call with one SearchRecord per ChunkGroup

Any IndexingError moves the run to FAILED; remaining stages are skipped and
the exception is re-raised with `document_name` and `stage` set. There is no
compensation: a failed publish leaves the document absent from the index
until the next successful run.

Unreadable OCR objects (ReadError) are the only tolerated failure. They are
logged at WARNING and reported in IndexingResult.skipped_objects.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from enum import Enum

from ris_search.core.errors import IndexingError, ReadError, UnrecognizedNameError
from ris_search.db.records import HierarchyRecordStore
from ris_search.processing.chunking import DEFAULT_THRESHOLD_BYTES, ChunkGroup, PageChunker
from ris_search.processing.enrichment import HierarchyEnricher
from ris_search.processing.keys import HierarchyKey, KeyResolver
from ris_search.schemas.search import (
    HierarchyEntity,
    RelatedRecord,
    SearchDocument,
    SearchPage,
    SearchRecord,
)
from ris_search.searchindex.base import SearchIndexBase, source_filename_filter
from ris_search.storage.s3 import OcrResultStorage

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    START          = "start"
    DELETE_OLD     = "delete_old"
    LIST_AND_CHUNK = "list_and_chunk"
    ENRICH         = "enrich"
    PUBLISH_NEW    = "publish_new"
    DONE           = "done"
    FAILED         = "failed"


@dataclass
class IndexingResult:
    document_name:   str
    stage:           PipelineStage
    record_count:    int = 0
    total_pages:     int = 0
    skipped_objects: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "document_name":   self.document_name,
            "stage":           self.stage.value,
            "record_count":    self.record_count,
            "total_pages":     self.total_pages,
            "skipped_objects": list(self.skipped_objects),
        }


class IndexingPipeline:
    """
    Delete-then-insert publisher for a single document per call.

    Collaborators are injected so the worker task owns their lifetimes
    (DB session, S3 session, search-index client).
    """

    def __init__(
        self,
        resolver: KeyResolver,
        storage: OcrResultStorage,
        index: SearchIndexBase,
        store: HierarchyRecordStore,
        threshold_bytes: int = DEFAULT_THRESHOLD_BYTES,
        enricher: HierarchyEnricher | None = None,
    ) -> None:
        self._resolver = resolver
        self._storage = storage
        self._index = index
        self._store = store
        self._enricher = enricher or HierarchyEnricher(store)
        self._threshold = threshold_bytes

    async def update_search_for_document(self, document_name: str) -> IndexingResult:
        """
        Raises:
            IndexingError subclass, annotated with document_name and the
            stage that failed.
        """
        result = IndexingResult(document_name=document_name, stage=PipelineStage.START)
        stage = PipelineStage.START
        logger.info("Indexing start | doc=%s", document_name)

        try:
            stage = PipelineStage.DELETE_OLD
            deleted = await self._index.delete_by(source_filename_filter(document_name))
            logger.info("Old records deleted | doc=%s deleted=%s", document_name, deleted)

            stage = PipelineStage.LIST_AND_CHUNK
            total_pages, groups = await self._list_and_chunk(document_name, result.skipped_objects)
            result.total_pages = total_pages

            stage = PipelineStage.ENRICH
            doc_key = self._resolve_document_key(document_name)
            entity, related = await self._enricher.enrich(doc_key.parent)
            attachment = await self._store.get(doc_key)
            document = SearchDocument(
                title=attachment.title,
                encoded_key=doc_key.encode(),
                kind=doc_key.kind.value,
                name=doc_key.name,
                source_filename=document_name,
            )

            stage = PipelineStage.PUBLISH_NEW
            records = _build_records(groups, total_pages, entity, related, document)
            result.record_count = await self._index.save_objects(records)

        except IndexingError as exc:
            exc.stage = stage.value
            exc.document_name = document_name
            result.stage = PipelineStage.FAILED
            logger.error(
                "Indexing failed | doc=%s stage=%s error=%s",
                document_name, stage.value, exc,
                exc_info=True,
            )
            raise

        result.stage = PipelineStage.DONE
        logger.info(
            "Indexing complete | doc=%s records=%d pages=%d skipped=%d",
            document_name, result.record_count, result.total_pages,
            len(result.skipped_objects),
        )
        return result

    # ------------------------------------------------------------------
    # Stage helpers
    # ------------------------------------------------------------------

    async def _list_and_chunk(
        self,
        document_name: str,
        skipped: list[str],
    ) -> tuple[int, list[ChunkGroup]]:
        chunker = PageChunker(threshold_bytes=self._threshold)

        async for object_name in self._storage.list_objects(document_name):
            try:
                pages = await self._storage.read_ocr_result(object_name)
            except ReadError as exc:
                logger.warning(
                    "OCR result skipped | doc=%s object=%s error=%s",
                    document_name, object_name, exc,
                )
                skipped.append(object_name)
                continue
            chunker.add_pages(pages)

        total_pages, groups = chunker.result()
        logger.info(
            "Pages chunked | doc=%s pages=%d groups=%d",
            document_name, total_pages, len(groups),
        )
        return total_pages, groups

    def _resolve_document_key(self, document_name: str) -> HierarchyKey:
        base_name = posixpath.basename(document_name)
        key = self._resolver.resolve(base_name)

        if not key.kind.is_terminal:
            raise UnrecognizedNameError(base_name, f"resolves to {key.kind.value}, not a document")
        if key.parent is None or not key.parent.kind.is_enrichable:
            raise UnrecognizedNameError(base_name, "document has no enrichable parent")
        return key


def _build_records(
    groups: list[ChunkGroup],
    total_pages: int,
    entity: HierarchyEntity,
    related: list[RelatedRecord],
    document: SearchDocument,
) -> list[SearchRecord]:
    return [
        SearchRecord(
            pages=[SearchPage(page_number=p.page_number, text=p.text) for p in group.pages],
            total_page_count=total_pages,
            entity=entity,
            related=related,
            document=document,
        )
        for group in groups
    ]
