"""Base utilities for docshelf background tasks.

Task arguments are JSON-serializable ids and flags only: the worker reloads
every record from the database and never relies on state from the process
that enqueued the task.
"""

import logging
from uuid import UUID

from celery import Task
from sqlalchemy.orm import Session

from ..analysis.orchestrator import mark_analysis_failed
from ..database import SessionLocal

logger = logging.getLogger(__name__)


def parse_document_id(document_id: str) -> UUID:
    """Parse a document id task argument.

    Raises:
        ValueError: If document_id is not a valid UUID string
    """
    try:
        return UUID(str(document_id))
    except (ValueError, AttributeError, TypeError) as e:
        raise ValueError(f"Invalid document_id format '{document_id}': {str(e)}")


def get_worker_session() -> Session:
    """Create a database session for a worker task (caller closes it)."""
    return SessionLocal()


class AnalysisTask(Task):
    """Base task for document analysis with a dead-letter action.

    When the task finally fails (retries exhausted or an unexpected error),
    on_failure marks the document analyzed so it never stays pending.
    """

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        document_id = kwargs.get("document_id") or (args[0] if args else None)
        logger.error(
            f"Document analysis task failed: document={document_id}, error={exc}",
            extra={"document_id": document_id, "task_id": task_id},
        )
        if document_id is None:
            return

        session = get_worker_session()
        try:
            mark_analysis_failed(session, parse_document_id(document_id))
        finally:
            session.close()
