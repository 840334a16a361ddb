"""
Celery Tasks: Search Re-indexing

Task: update_search_for_document
  Builds one IndexingPipeline per run with its own DB session, S3 storage
  and search-index client, then runs delete → list/chunk → enrich → publish.
  Never retried: an IndexingError propagates and the task is marked failed
  with the stage that broke.

Task: health_check
  Pings the record store.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from celery import Task

from ris_search.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Async task helper
# ---------------------------------------------------------------------------

def run_async(coro):
    """Execute an async coroutine from a synchronous Celery task."""
    try:
        loop = asyncio.get_event_loop()
        if loop.is_running():
            import concurrent.futures
            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                future = pool.submit(asyncio.run, coro)
                return future.result()
        return loop.run_until_complete(coro)
    except RuntimeError:
        return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Re-indexing task
# ---------------------------------------------------------------------------

@celery_app.task(
    name="ris_search.workers.tasks.update_search_for_document",
    bind=True,
    max_retries=0,
    acks_late=True,
    reject_on_worker_lost=True,
    soft_time_limit=270,
    time_limit=330,
)
def update_search_for_document(self: Task, *, document_name: str) -> dict[str, Any]:
    """Re-index one document; returns the IndexingResult as a dict."""
    return run_async(_update_search_for_document_async(document_name))


async def _update_search_for_document_async(document_name: str) -> dict[str, Any]:
    from ris_search.core.config import settings
    from ris_search.db.records import HierarchyRecordStore
    from ris_search.db.session import get_store_session
    from ris_search.processing.keys import KeyResolver
    from ris_search.searchindex.factory import get_search_index
    from ris_search.services.indexing import IndexingPipeline
    from ris_search.storage.s3 import OcrResultStorage

    storage = OcrResultStorage(
        bucket=settings.ocr_bucket,
        region=settings.aws_region,
        endpoint_url=settings.s3_endpoint_url,
    )
    index = get_search_index()
    try:
        async with get_store_session() as db:
            pipeline = IndexingPipeline(
                resolver=KeyResolver(settings.key_markers()),
                storage=storage,
                index=index,
                store=HierarchyRecordStore(db),
                threshold_bytes=settings.chunk_threshold_bytes,
            )
            result = await pipeline.update_search_for_document(document_name)
    finally:
        index.close()

    return result.as_dict()


# ---------------------------------------------------------------------------
# Health check task
# ---------------------------------------------------------------------------

@celery_app.task(name="ris_search.workers.tasks.health_check")
def health_check() -> dict[str, Any]:
    from ris_search.db.session import check_db_health

    db = run_async(check_db_health())
    return {"status": db["status"], "worker": "healthy", "database": db}
