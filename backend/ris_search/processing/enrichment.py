"""
Hierarchy Enrichment
════════════════════

Turns the resolved owner of a document (session, submission or agenda item)
into the HierarchyEntity summary plus the RelatedRecord list that every
search record of the document carries.

Dispatch (by key kind)
──────────────────────
  session      get(session)                  related: agenda items with session_id
  submission   get(submission)               related: agenda items with submission_id
  agenda_item  get(agenda item)              related: agenda items with agenda_item_id
               + get(owning session)

Each branch issues exactly one related-records query, scoped to the node's
own numeric id. Any store failure aborts the whole enrichment; no partial
entity is ever returned. Terminal kinds (attachments) are not enrichable.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from ris_search.core.errors import RecordNotFoundError, UnrecognizedNameError
from ris_search.models.hierarchy import AgendaItemRecord
from ris_search.processing.keys import ENRICHABLE_KINDS, HierarchyKey, HierarchyKind
from ris_search.schemas.search import HierarchyEntity, RelatedRecord

if TYPE_CHECKING:
    from ris_search.db.records import HierarchyRecordStore

logger = logging.getLogger(__name__)


def _unix(value: datetime) -> int:
    return int(value.timestamp())


def to_related_record(item: AgendaItemRecord) -> RelatedRecord:
    return RelatedRecord(
        status=item.status,
        type=item.item_type,
        resolution_ref=item.resolution_ref,
        date=_unix(item.date),
        session_id=item.session_id,
        decision_type=item.decision_type,
        committee=item.committee,
        agenda_item_id=item.agenda_item_id,
        subject=item.subject,
        clerk=item.clerk,
        lead_department=item.lead_department,
        visibility=item.visibility,
        submission_id=item.submission_id,
    )


class HierarchyEnricher:
    """Builds entity summaries from the record store. One instance per run."""

    def __init__(self, store: HierarchyRecordStore) -> None:
        self._store = store

    async def enrich(self, key: HierarchyKey) -> tuple[HierarchyEntity, list[RelatedRecord]]:
        """
        Raises:
            UnrecognizedNameError: `key` is a terminal kind.
            RecordNotFoundError / StoreError: from the record store.
        """
        handler = self._HANDLERS.get(key.kind)
        if handler is None:
            raise UnrecognizedNameError(str(key), f"{key.kind.value} keys cannot be enriched")

        entity, related_field, related_id = await handler(self, key)

        items = await self._store.query_all(HierarchyKind.AGENDA_ITEM, related_field, related_id)
        related = [to_related_record(item) for item in items]

        logger.info(
            "Enriched | kind=%s name=%s title=%r related=%d",
            entity.kind, entity.name, entity.title, len(related),
        )
        return entity, related

    # ------------------------------------------------------------------
    # Per-kind branches: return (entity, related filter field, filter value)
    # ------------------------------------------------------------------

    async def _enrich_session(self, key: HierarchyKey) -> tuple[HierarchyEntity, str, int]:
        session = await self._store.get(key)
        entity = HierarchyEntity(
            title=session.title,
            subtitle=session.committee,
            date=_unix(session.date),
            kind=key.kind.value,
            name=str(session.session_id),
            encoded_key=key.encode(),
        )
        return entity, "session_id", session.session_id

    async def _enrich_submission(self, key: HierarchyKey) -> tuple[HierarchyEntity, str, int]:
        submission = await self._store.get(key)
        entity = HierarchyEntity(
            title=submission.subject,
            subtitle=submission.lead_department,
            date=_unix(submission.date_created),
            kind=key.kind.value,
            name=str(submission.submission_id),
            encoded_key=key.encode(),
        )
        return entity, "submission_id", submission.submission_id

    async def _enrich_agenda_item(self, key: HierarchyKey) -> tuple[HierarchyEntity, str, int]:
        item = await self._store.get(key)

        session_key = _owning_session(key)
        if session_key is None:
            raise RecordNotFoundError(HierarchyKind.SESSION.value, f"ancestor of {key}")
        session = await self._store.get(session_key)

        entity = HierarchyEntity(
            title=f"{item.subject} ({item.number}: {session.title})",
            subtitle=f"{item.lead_department} | {session.committee}",
            date=_unix(item.date),
            kind=key.kind.value,
            name=str(item.agenda_item_id),
            encoded_key=key.encode(),
        )
        return entity, "agenda_item_id", item.agenda_item_id

    # kind → unbound handler, called as handler(self, key)
    _HANDLERS = {
        HierarchyKind.SESSION:     _enrich_session,
        HierarchyKind.SUBMISSION:  _enrich_submission,
        HierarchyKind.AGENDA_ITEM: _enrich_agenda_item,
    }


def _owning_session(key: HierarchyKey) -> HierarchyKey | None:
    node = key.parent
    while node is not None and node.kind is not HierarchyKind.SESSION:
        node = node.parent
    return node


if set(HierarchyEnricher._HANDLERS) != ENRICHABLE_KINDS:
    raise RuntimeError("HierarchyEnricher must handle exactly the enrichable kinds")
