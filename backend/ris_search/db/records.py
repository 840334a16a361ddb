"""
Hierarchy Record Store

Typed access to the RIS hierarchy tables:

  get(key)                        point lookup by encoded key
  query_all(kind, field, value)   equality filter on one column

All SQLAlchemy failures surface as StoreError and missing rows as
RecordNotFoundError, so callers never handle driver exceptions.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ris_search.core.errors import RecordNotFoundError, StoreError
from ris_search.models.hierarchy import (
    AgendaItemRecord,
    AttachmentRecord,
    Base,
    SessionRecord,
    SubmissionRecord,
)
from ris_search.processing.keys import HierarchyKey, HierarchyKind

logger = logging.getLogger(__name__)


MODEL_BY_KIND: dict[HierarchyKind, type[Base]] = {
    HierarchyKind.SESSION:             SessionRecord,
    HierarchyKind.SUBMISSION:          SubmissionRecord,
    HierarchyKind.AGENDA_ITEM:         AgendaItemRecord,
    HierarchyKind.ATTACHMENT:          AttachmentRecord,
    HierarchyKind.ATTACHMENT_DOCUMENT: AttachmentRecord,
}


class HierarchyRecordStore:
    """
    Read-only record store bound to one AsyncSession.
    One instance per indexing run.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, key: HierarchyKey) -> Any:
        """
        Fetch the row for `key`.

        Raises:
            RecordNotFoundError: no row has this key.
            StoreError: the query itself failed.
        """
        model = MODEL_BY_KIND[key.kind]
        stmt = select(model).where(model.key_enc == key.encode())
        try:
            result = await self._db.execute(stmt)
            record = result.scalars().first()
        except SQLAlchemyError as exc:
            logger.error("Record get failed | kind=%s key=%s error=%s", key.kind.value, key, exc)
            raise StoreError(f"get {key.kind.value} {key} failed: {exc}") from exc

        if record is None:
            raise RecordNotFoundError(key.kind.value, str(key))
        return record

    async def query_all(self, kind: HierarchyKind, field: str, value: int) -> list[Any]:
        """Return every `kind` row whose `field` equals `value`."""
        model = MODEL_BY_KIND[kind]
        column = getattr(model, field, None)
        if column is None:
            raise StoreError(f"{model.__name__} has no field {field!r}")

        stmt = select(model).where(column == value)
        try:
            result = await self._db.execute(stmt)
            rows = list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.error(
                "Record query failed | kind=%s %s=%s error=%s",
                kind.value, field, value, exc,
            )
            raise StoreError(f"query {kind.value} {field}={value} failed: {exc}") from exc

        logger.debug("Record query | kind=%s %s=%s rows=%d", kind.value, field, value, len(rows))
        return rows
