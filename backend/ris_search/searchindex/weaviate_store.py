"""
Weaviate Search Index: Keyword (BM25) Collection

All search records live in one collection (SEARCH_COLLECTION). No vectors
are stored: the collection is configured without a vectorizer and is
queried with BM25 over the `text` and `entity_title` properties.

Nested record fields are flattened into top-level properties so they are
filterable. The complete camelCase record is also kept in `payload` and
returned verbatim to search clients.

Filter expressions use the published field names, which are mapped to
properties here:

    document.sourceFilename  →  source_filename
    document.encodedKey      →  document_encoded_key
    entity.encodedKey        →  entity_encoded_key
"""

from __future__ import annotations

import logging

import weaviate
import weaviate.classes as wvc
from weaviate.classes.config import Configure, DataType, Property
from weaviate.classes.init import Auth
from weaviate.classes.query import Filter
from weaviate.exceptions import WeaviateBaseError

from ris_search.core.config import settings
from ris_search.core.errors import IndexServiceError
from ris_search.schemas.search import SearchRecord
from ris_search.searchindex.base import SearchIndexBase, parse_filter, record_id

logger = logging.getLogger(__name__)

FILTER_PROPERTIES: dict[str, str] = {
    "document.sourceFilename": "source_filename",
    "document.encodedKey":     "document_encoded_key",
    "entity.encodedKey":       "entity_encoded_key",
}


class WeaviateSearchIndex(SearchIndexBase):
    """Search index backed by a single Weaviate collection."""

    def __init__(self, client: weaviate.WeaviateClient, collection: str) -> None:
        self._client = client
        self._name = collection
        self._ensure_collection()

    # ------------------------------------------------------------------
    # Collection provisioning (idempotent, called at __init__)
    # ------------------------------------------------------------------

    def _ensure_collection(self) -> None:
        """Create the collection unless it already exists."""
        if self._client.collections.exists(self._name):
            return

        self._client.collections.create(
            name=self._name,
            description="OCR text of RIS attachments, one object per page group",
            vectorizer_config=Configure.Vectorizer.none(),
            properties=[
                Property(name="source_filename",      data_type=DataType.TEXT,  index_filterable=True,
                         tokenization=wvc.config.Tokenization.FIELD),
                Property(name="document_title",       data_type=DataType.TEXT,  index_searchable=True),
                Property(name="document_kind",        data_type=DataType.TEXT,  index_filterable=True),
                Property(name="document_name",        data_type=DataType.TEXT,  index_filterable=True),
                Property(name="document_encoded_key", data_type=DataType.TEXT,  index_filterable=True,
                         tokenization=wvc.config.Tokenization.FIELD),
                Property(name="entity_title",         data_type=DataType.TEXT,  index_searchable=True),
                Property(name="entity_subtitle",      data_type=DataType.TEXT,  index_searchable=True),
                Property(name="entity_kind",          data_type=DataType.TEXT,  index_filterable=True),
                Property(name="entity_name",          data_type=DataType.TEXT,  index_filterable=True),
                Property(name="entity_encoded_key",   data_type=DataType.TEXT,  index_filterable=True,
                         tokenization=wvc.config.Tokenization.FIELD),
                Property(name="entity_date",          data_type=DataType.INT,   index_filterable=True),
                Property(name="page_numbers",         data_type=DataType.INT_ARRAY),
                Property(name="total_page_count",     data_type=DataType.INT),
                Property(name="text",                 data_type=DataType.TEXT,  index_searchable=True),
                Property(name="payload",              data_type=DataType.TEXT,
                         index_filterable=False, index_searchable=False),
            ],
        )
        logger.info("Weaviate collection created: %s", self._name)

    def _collection(self):
        return self._client.collections.get(self._name)

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    async def delete_by(self, filter_expression: str) -> int:
        field, value = parse_filter(filter_expression)
        prop = FILTER_PROPERTIES.get(field)
        if prop is None:
            raise IndexServiceError(f"Field {field!r} is not filterable")

        try:
            result = self._collection().data.delete_many(
                where=Filter.by_property(prop).equal(value)
            )
        except WeaviateBaseError as exc:
            raise IndexServiceError(f"delete_by {filter_expression} failed: {exc}") from exc

        if result.failed:
            raise IndexServiceError(
                f"delete_by {filter_expression}: {result.failed} of {result.matches} deletions failed"
            )

        logger.info(
            "Weaviate delete_by | collection=%s %s=%r deleted=%d",
            self._name, prop, value, result.successful,
        )
        return result.successful

    async def save_objects(self, records: list[SearchRecord]) -> int:
        """Batch upsert; an object whose id already exists is overwritten."""
        if not records:
            return 0

        objects = [
            wvc.data.DataObject(uuid=record_id(rec, idx), properties=_properties(rec))
            for idx, rec in enumerate(records)
        ]

        try:
            result = self._collection().data.insert_many(objects)
        except WeaviateBaseError as exc:
            raise IndexServiceError(f"save_objects failed: {exc}") from exc

        if result.has_errors:
            for idx, err in result.errors.items():
                logger.error("Weaviate upsert error | object=%d error=%s", idx, err.message)
            raise IndexServiceError(
                f"save_objects: {len(result.errors)} of {len(objects)} objects rejected"
            )

        logger.info("Weaviate save_objects | collection=%s count=%d", self._name, len(objects))
        return len(objects)

    def close(self) -> None:
        self._client.close()


def _properties(rec: SearchRecord) -> dict:
    return {
        "source_filename":      rec.document.source_filename,
        "document_title":       rec.document.title,
        "document_kind":        rec.document.kind,
        "document_name":        rec.document.name,
        "document_encoded_key": rec.document.encoded_key,
        "entity_title":         rec.entity.title,
        "entity_subtitle":      rec.entity.subtitle,
        "entity_kind":          rec.entity.kind,
        "entity_name":          rec.entity.name,
        "entity_encoded_key":   rec.entity.encoded_key,
        "entity_date":          rec.entity.date,
        "page_numbers":         [p.page_number for p in rec.pages],
        "total_page_count":     rec.total_page_count,
        "text":                 rec.text,
        "payload":              rec.model_dump_json(by_alias=True),
    }


# ---------------------------------------------------------------------------
# Client factory: call once per worker run and close afterwards
# ---------------------------------------------------------------------------

def create_weaviate_client() -> weaviate.WeaviateClient:
    """
    Create and return a connected Weaviate client.
    Supports both local (Docker) and Weaviate Cloud modes.
    """
    if settings.weaviate_api_key:
        return weaviate.connect_to_weaviate_cloud(
            cluster_url=settings.weaviate_url,
            auth_credentials=Auth.api_key(settings.weaviate_api_key),
        )
    return weaviate.connect_to_local(
        host=settings.weaviate_host,
        port=settings.weaviate_port,
        grpc_port=settings.weaviate_grpc_port,
    )
