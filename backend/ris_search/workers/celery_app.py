"""
Celery Application Factory

Runs the indexer as a queue consumer. The OCR job publishes one message per
finished document; the worker re-indexes that document.

Queue topology:
  documents.index   document re-indexing (update_search_for_document)
  system.health     internal health-check tasks

Task payloads carry only the document name. OCR text is always loaded from
S3 inside the worker.
"""

from __future__ import annotations

import logging

from celery import Celery
from celery.signals import after_setup_logger, task_failure, task_postrun, task_prerun
from kombu import Exchange, Queue

from ris_search.core.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Queue and exchange definitions
# ---------------------------------------------------------------------------

DOCUMENTS_EXCHANGE = Exchange("documents", type="direct", durable=True)

TASK_QUEUES = (
    Queue(
        "documents.index",
        exchange=DOCUMENTS_EXCHANGE,
        routing_key="documents.index",
        durable=True,
    ),
    Queue(
        "system.health",
        Exchange("system", type="direct"),
        routing_key="system.health",
        durable=True,
    ),
)

TASK_ROUTES = {
    "ris_search.workers.tasks.update_search_for_document": {"queue": "documents.index"},
    "ris_search.workers.tasks.health_check":               {"queue": "system.health"},
}

# ---------------------------------------------------------------------------
# Celery app factory
# ---------------------------------------------------------------------------

def create_celery_app() -> Celery:
    app = Celery("ris_search")

    app.conf.update(
        # --- Broker / Backend ---
        broker_url=settings.celery_broker_url,
        result_backend=settings.celery_result_backend,

        # --- Serialization ---
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        event_serializer="json",

        # --- Queues ---
        task_queues=TASK_QUEUES,
        task_routes=TASK_ROUTES,
        task_default_queue="documents.index",
        task_default_exchange="documents",
        task_default_routing_key="documents.index",

        # --- Reliability ---
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        worker_prefetch_multiplier=1,   # one document at a time per process

        # --- Retries: a failed run is reported, never replayed ---
        task_max_retries=0,

        # --- Timeouts ---
        task_soft_time_limit=300,
        task_time_limit=360,

        result_expires=3600,

        timezone="UTC",
        enable_utc=True,

        worker_max_tasks_per_child=200,
    )

    app.autodiscover_tasks(["ris_search.workers"])

    return app


celery_app = create_celery_app()


# ---------------------------------------------------------------------------
# Logging setup + task signals
# ---------------------------------------------------------------------------

@after_setup_logger.connect
def on_setup_logger(logger, **_):
    logger.setLevel(settings.log_level.upper())
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@task_prerun.connect
def on_task_prerun(task_id, task, args, kwargs, **_):
    logger.info(
        "Task start | task_id=%s task=%s doc=%s",
        task_id, task.name, kwargs.get("document_name", "?"),
    )


@task_postrun.connect
def on_task_postrun(task_id, task, args, kwargs, retval, state, **_):
    logger.info(
        "Task end | task_id=%s task=%s state=%s doc=%s",
        task_id, task.name, state, kwargs.get("document_name", "?"),
    )


@task_failure.connect
def on_task_failure(task_id, exception, args, kwargs, traceback, einfo, **_):
    logger.error(
        "Task failed | task_id=%s doc=%s stage=%s error=%s",
        task_id,
        (kwargs or {}).get("document_name", "?"),
        getattr(exception, "stage", None),
        exception,
        exc_info=True,
    )
