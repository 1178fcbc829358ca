"""Search projection sync.

Documents are projected to a flat record (Document.to_searchable_dict) and
pushed to an external full-text index after each successful commit. Nothing is
pushed for rolled-back transactions.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional
from uuid import UUID

from sqlalchemy import event
from sqlalchemy.orm import Session

from ..models.document import Document

logger = logging.getLogger(__name__)

_PENDING_KEY = "docshelf_search_pending"


class SearchIndexPort(ABC):
    """Port for the external full-text index."""

    @abstractmethod
    def upsert(self, document_id: UUID, projection: dict) -> None:
        """Insert or replace the projection for document_id."""
        pass

    @abstractmethod
    def remove(self, document_id: UUID) -> None:
        """Remove document_id from the index (no-op if absent)."""
        pass


class LoggingSearchIndex(SearchIndexPort):
    """Default adapter used when no search engine is configured: logs each change."""

    def upsert(self, document_id: UUID, projection: dict) -> None:
        logger.debug(f"Search index upsert: document={document_id}", extra={"document_id": document_id})

    def remove(self, document_id: UUID) -> None:
        logger.debug(f"Search index remove: document={document_id}", extra={"document_id": document_id})


def get_search_index() -> SearchIndexPort:
    """Index adapter shared by the API process and the workers."""
    return LoggingSearchIndex()


def _pending(session: Session) -> Dict[UUID, Optional[dict]]:
    return session.info.setdefault(_PENDING_KEY, {})


def register_search_sync(index: SearchIndexPort, target=Session) -> Callable[[], None]:
    """Install session events that keep index in sync with Document writes.

    Projections are captured at flush time (the row state that will be committed)
    and pushed after commit. A None entry means the document was deleted.

    Args:
        index: Search index adapter
        target: Session class or sessionmaker to listen on (default: all sessions)

    Returns:
        Callable that removes the listeners again

    Example:
        unregister = register_search_sync(MeilisearchIndex(...), SessionLocal)
    """

    def after_flush(session, flush_context):
        pending = _pending(session)
        for obj in list(session.new) + list(session.dirty):
            if isinstance(obj, Document):
                pending[obj.id] = obj.to_searchable_dict()
        for obj in session.deleted:
            if isinstance(obj, Document):
                pending[obj.id] = None

    def after_commit(session):
        pending = session.info.pop(_PENDING_KEY, {})
        for document_id, projection in pending.items():
            if projection is None:
                index.remove(document_id)
            else:
                index.upsert(document_id, projection)

    def after_rollback(session, previous_transaction):
        session.info.pop(_PENDING_KEY, None)

    event.listen(target, "after_flush", after_flush)
    event.listen(target, "after_commit", after_commit)
    event.listen(target, "after_soft_rollback", after_rollback)

    def unregister() -> None:
        event.remove(target, "after_flush", after_flush)
        event.remove(target, "after_commit", after_commit)
        event.remove(target, "after_soft_rollback", after_rollback)

    return unregister
