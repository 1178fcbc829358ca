"""Document service - upload, metadata edits, visibility, download, deletion.

Every public method takes the acting user explicitly and checks the
authorization policy before mutating anything. Each logical operation is
committed as one transaction.
"""

import logging
import math
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.documents.ports.object_storage_port import (
    BlobStorePort,
    StorageError,
    build_storage_path,
)
from ..domain.documents.sensitivity import Sensitivity
from ..domain.documents.validation import (
    MAX_FILE_SIZE,
    validate_description,
    validate_file_size,
    validate_filename,
    validate_tags,
    validate_title,
)
from ..domain.documents.visibility import Visibility
from ..errors import (
    DocumentNotFoundError,
    DocumentValidationError,
    StorageInconsistencyError,
)
from ..models.document import Document
from ..models.user import User
from ..observability.metrics import (
    documents_uploaded_total,
    upload_size_bytes,
    visibility_transitions_total,
)
from ..policies.document_policy import DocumentAction, authorize

logger = logging.getLogger(__name__)

EnqueueAnalysis = Callable[[UUID, bool], None]

EDITABLE_FIELDS = ("title", "description", "tags")


@dataclass
class DocumentDownload:
    """Byte stream plus response metadata for a download."""
    chunks: AsyncIterator[bytes]
    filename: str
    mime_type: str
    size_bytes: int


def format_bytes(size: int) -> str:
    """Format a byte total with two decimals (dashboard storage figure).

    Example:
        >>> format_bytes(0)
        '0 B'
        >>> format_bytes(1536)
        '1.5 KB'
    """
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    return f"{round(size / 1024 ** i, 2):g} {units[i]}"


def file_category(mime_type: Optional[str]) -> str:
    """Bucket a media type into a dashboard category."""
    mime_type = (mime_type or "").lower()
    if mime_type.startswith("image/"):
        return "Images"
    if mime_type.startswith("video/"):
        return "Videos"
    if mime_type.startswith("audio/"):
        return "Audio"
    if "pdf" in mime_type:
        return "PDFs"
    if "spreadsheet" in mime_type or "excel" in mime_type:
        return "Spreadsheets"
    if "document" in mime_type or "word" in mime_type:
        return "Documents"
    if mime_type.startswith("text/"):
        return "Text Files"
    return "Other"


def _raise_if_invalid(result: Tuple[bool, Optional[str]]) -> None:
    is_valid, error = result
    if not is_valid:
        raise DocumentValidationError(error)


class DocumentService:
    """Application service for document lifecycle operations.

    Args:
        session: SQLAlchemy session
        storage: Blob store adapter
        enqueue_analysis: Callable scheduling the background analysis job
            (document_id, force_update)
        max_upload_size: Upload size limit in bytes
        storage_namespace: First storage path segment
        treat_missing_blob_as_deleted: Whether an already-absent blob allows deletion
    """

    def __init__(
        self,
        session: Session,
        storage: BlobStorePort,
        enqueue_analysis: EnqueueAnalysis,
        max_upload_size: int = MAX_FILE_SIZE,
        storage_namespace: str = "documents",
        treat_missing_blob_as_deleted: bool = True,
    ):
        self.session = session
        self.storage = storage
        self.enqueue_analysis = enqueue_analysis
        self.max_upload_size = max_upload_size
        self.storage_namespace = storage_namespace
        self.treat_missing_blob_as_deleted = treat_missing_blob_as_deleted

    # -- lookups --------------------------------------------------------------

    def get_for_actor(
        self,
        actor: User,
        document_id: UUID,
        action: DocumentAction = DocumentAction.VIEW,
    ) -> Document:
        """Load a document and authorize action on it.

        Raises:
            DocumentNotFoundError: Unknown id
            AuthorizationError: Policy denies action
        """
        document = self.session.get(Document, document_id)
        if document is None:
            raise DocumentNotFoundError()
        authorize(actor, action, document)
        return document

    def list_owned(
        self,
        actor: User,
        visibility: Optional[Visibility] = None,
        search: Optional[str] = None,
        page: int = 1,
        per_page: int = 12,
    ) -> Tuple[List[Document], int]:
        """Owned documents, newest first, with optional visibility and text filter.

        Returns:
            (documents on this page, total matching)
        """
        stmt = select(Document).where(Document.user_id == actor.id)
        if visibility is not None:
            stmt = stmt.where(Document.visibility == visibility)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Document.title.ilike(pattern),
                    Document.original_name.ilike(pattern),
                    Document.description.ilike(pattern),
                    Document.ai_summary.ilike(pattern),
                )
            )

        total = self.session.scalar(select(func.count()).select_from(stmt.subquery()))
        page = max(page, 1)
        documents = self.session.scalars(
            stmt.order_by(Document.created_at.desc()).offset((page - 1) * per_page).limit(per_page)
        ).all()
        return list(documents), total or 0

    # -- upload -----------------------------------------------------------------

    async def upload(
        self,
        actor: User,
        data: bytes,
        original_name: str,
        mime_type: Optional[str],
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Document:
        """Validate, store and register a new document, then enqueue analysis.

        The document starts private, unanalyzed, with no sensitivity.

        Args:
            actor: Uploading user (becomes the owner)
            data: File bytes
            original_name: Client filename
            mime_type: Declared media type (application/octet-stream if unknown)
            title: Optional user title
            description: Optional user description

        Returns:
            The persisted Document

        Raises:
            AuthorizationError: No authenticated actor
            DocumentValidationError: Empty/oversized file, bad filename, title or description
            StorageError: Blob write failed
        """
        authorize(actor, DocumentAction.CREATE)

        try:
            if not data:
                raise DocumentValidationError("The file must not be empty.")
            _raise_if_invalid(validate_file_size(len(data), self.max_upload_size))
            _raise_if_invalid(validate_filename(original_name))
            _raise_if_invalid(validate_title(title))
            _raise_if_invalid(validate_description(description))
        except DocumentValidationError:
            documents_uploaded_total.labels(status="rejected").inc()
            raise

        mime_type = mime_type or "application/octet-stream"
        storage_path = build_storage_path(actor.id, original_name, namespace=self.storage_namespace)

        stored = await self.storage.put(storage_path, data, mime_type=mime_type)

        document = Document(
            user_id=actor.id,
            original_name=original_name,
            mime_type=mime_type,
            size_bytes=stored.size_bytes,
            storage_disk=stored.disk,
            storage_path=stored.path,
            visibility=Visibility.PRIVATE,
            title=title or None,
            description=description or None,
            ai_analyzed=False,
        )
        self.session.add(document)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            documents_uploaded_total.labels(status="error").inc()
            logger.error(f"Failed to persist uploaded document, removing blob {storage_path}")
            await self.storage.delete(storage_path)
            raise

        documents_uploaded_total.labels(status="success").inc()
        upload_size_bytes.observe(stored.size_bytes)
        logger.info(
            f"Document uploaded: id={document.id}, name={original_name}, size={stored.size_bytes}",
            extra={"document_id": document.id, "user_id": actor.id},
        )

        self.enqueue_analysis(document.id, False)
        return document

    # -- metadata -----------------------------------------------------------------

    def update_metadata(self, actor: User, document: Document, **changes) -> Document:
        """Set title, description and/or tags (only the keys passed).

        Raises:
            AuthorizationError: Actor is not the owner
            DocumentValidationError: Invalid values or unknown fields
        """
        authorize(actor, DocumentAction.UPDATE, document)
        self._validate_changes(changes)

        for field, value in changes.items():
            if field == "tags":
                value = list(value) if value is not None else None
            setattr(document, field, value)

        self.session.commit()
        logger.info(
            f"Document {document.id} metadata updated: fields={sorted(changes)}",
            extra={"document_id": document.id, "user_id": actor.id},
        )
        return document

    def apply_suggestions(
        self,
        actor: User,
        document: Document,
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Document:
        """Apply AI suggestions accepted by the owner; empty values are ignored."""
        changes = {
            "title": title,
            "description": description,
            "tags": list(tags) if tags else None,
        }
        changes = {field: value for field, value in changes.items() if value}
        if not changes:
            authorize(actor, DocumentAction.UPDATE, document)
            return document
        return self.update_metadata(actor, document, **changes)

    @staticmethod
    def _validate_changes(changes: dict) -> None:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise DocumentValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        if "title" in changes:
            _raise_if_invalid(validate_title(changes["title"]))
        if "description" in changes:
            _raise_if_invalid(validate_description(changes["description"]))
        if "tags" in changes:
            _raise_if_invalid(validate_tags(changes["tags"]))

    # -- visibility -----------------------------------------------------------------

    def publish(self, actor: User, document: Document) -> Document:
        """Make a document public (token generated once, reused afterwards).

        Raises:
            AuthorizationError: Not the owner, or the document is sensitive
            SensitiveDocumentError: Entity-level refusal for sensitive documents
        """
        authorize(actor, DocumentAction.CHANGE_VISIBILITY, document)
        document.publish()
        self.session.commit()

        visibility_transitions_total.labels(transition="publish").inc()
        logger.info(f"Document {document.id} is now public", extra={"document_id": document.id})
        return document

    def unpublish(self, actor: User, document: Document) -> Document:
        """Make a document private; its token is kept for a later publish."""
        authorize(actor, DocumentAction.CHANGE_VISIBILITY, document)
        document.unpublish()
        self.session.commit()

        visibility_transitions_total.labels(transition="unpublish").inc()
        logger.info(f"Document {document.id} is now private", extra={"document_id": document.id})
        return document

    # -- analysis -------------------------------------------------------------------

    def request_reanalysis(self, actor: User, document: Document) -> Document:
        """Reset ai_analyzed and enqueue a forced analysis run."""
        authorize(actor, DocumentAction.UPDATE, document)
        document.request_reanalysis()
        self.session.commit()

        self.enqueue_analysis(document.id, True)
        logger.info(f"Re-analysis queued for document {document.id}", extra={"document_id": document.id})
        return document

    # -- download / delete ---------------------------------------------------------------

    async def download(self, actor: User, document: Document) -> DocumentDownload:
        """Open a download stream for document.

        Raises:
            AuthorizationError: Actor may not download
            DocumentNotFoundError: Blob missing from storage
        """
        authorize(actor, DocumentAction.DOWNLOAD, document)
        return await self.open_stream(document)

    async def open_stream(self, document: Document) -> DocumentDownload:
        """Open a byte stream for an already-authorized document."""
        if not await self.storage.exists(document.storage_path):
            logger.warning(
                f"Blob missing for document {document.id}: {document.storage_path}",
                extra={"document_id": document.id},
            )
            raise DocumentNotFoundError("Document file not found in storage.")

        return DocumentDownload(
            chunks=self.storage.stream(document.storage_path),
            filename=document.original_name,
            mime_type=document.mime_type,
            size_bytes=document.size_bytes,
        )

    async def delete(self, actor: User, document: Document) -> None:
        """Delete the blob, then the record (grants cascade).

        The record is only removed once the blob is gone. An already-absent blob
        counts as removed when treat_missing_blob_as_deleted is set.

        Raises:
            AuthorizationError: Actor is not the owner
            StorageInconsistencyError: Blob could not be removed
        """
        authorize(actor, DocumentAction.DELETE, document)

        try:
            deleted = await self.storage.delete(document.storage_path)
        except StorageError as e:
            logger.error(
                f"Blob delete failed for document {document.id}: {e}",
                extra={"document_id": document.id},
            )
            raise StorageInconsistencyError() from e

        if not deleted and not self.treat_missing_blob_as_deleted:
            logger.warning(
                f"Blob already absent for document {document.id}, refusing to delete record",
                extra={"document_id": document.id},
            )
            raise StorageInconsistencyError("Document file is missing from storage.")

        document_id = document.id
        self.session.delete(document)
        self.session.commit()
        logger.info(f"Document {document_id} deleted", extra={"document_id": document_id, "user_id": actor.id})

    # -- dashboard ---------------------------------------------------------------------

    def dashboard(self, actor: User) -> dict:
        """Per-owner statistics, five most recent documents and counts by category."""
        owned = Document.user_id == actor.id

        def count(*criteria) -> int:
            return self.session.scalar(select(func.count(Document.id)).where(owned, *criteria)) or 0

        total_bytes = self.session.scalar(
            select(func.coalesce(func.sum(Document.size_bytes), 0)).where(owned)
        ) or 0

        stats = {
            "total_documents": count(),
            "public_documents": count(Document.visibility == Visibility.PUBLIC),
            "private_documents": count(Document.visibility == Visibility.PRIVATE),
            "total_storage": format_bytes(int(total_bytes)),
            "pending_analysis": count(Document.ai_analyzed.is_(False)),
            "sensitive_documents": count(Document.sensitivity == Sensitivity.SENSITIVE),
            "maybe_sensitive_documents": count(Document.sensitivity == Sensitivity.MAYBE_SENSITIVE),
        }

        recent = self.session.scalars(
            select(Document).where(owned).order_by(Document.created_at.desc()).limit(5)
        ).all()
        recent_documents = [
            {
                "id": str(doc.id),
                "title": doc.display_title,
                "visibility": doc.visibility.value,
                "sensitivity": doc.sensitivity.value if doc.sensitivity else None,
                "formatted_size": doc.formatted_size,
                "created_at": doc.created_at.isoformat() if doc.created_at else None,
                "ai_analyzed": bool(doc.ai_analyzed),
            }
            for doc in recent
        ]

        documents_by_type: dict = {}
        for mime_type in self.session.scalars(select(Document.mime_type).where(owned)):
            category = file_category(mime_type)
            documents_by_type[category] = documents_by_type.get(category, 0) + 1

        return {
            "stats": stats,
            "recent_documents": recent_documents,
            "documents_by_type": documents_by_type,
        }
