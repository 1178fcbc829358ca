"""Celery application for docshelf background jobs.

Run a worker with:
    celery -A docshelf.workers.celery_app worker --loglevel=INFO
"""

from typing import Callable, Optional

from celery import Celery
from celery.signals import setup_logging, worker_init, worker_process_init

from ..config import settings
from ..database import SessionLocal
from ..observability.logging_config import configure_logging
from ..search.indexer import get_search_index, register_search_sync

celery_app = Celery(
    "docshelf",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["docshelf.workers.analysis_worker"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    timezone="UTC",
    enable_utc=True,
)

_unregister_search_sync: Optional[Callable[[], None]] = None


@setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the API's log format in workers instead of Celery's own handlers."""
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)


def install_search_sync(**kwargs) -> Callable[[], None]:
    """Push Document projections to the search index after worker commits.

    Connected to worker_init (solo/threads pools) and worker_process_init
    (prefork children). Installs the listeners once per process.
    """
    global _unregister_search_sync
    if _unregister_search_sync is None:
        _unregister_search_sync = register_search_sync(get_search_index(), SessionLocal)
    return _unregister_search_sync


worker_init.connect(install_search_sync, weak=False)
worker_process_init.connect(install_search_sync, weak=False)
