"""Document SQLAlchemy model

Document represents an uploaded, user-owned file plus its classification state.
It owns the visibility/sensitivity/analysis state machine:

    upload                -> (private, sensitivity=None, ai_analyzed=False)
    publish()             -> public (token generated once, reused afterwards)
    unpublish()           -> private (token kept)
    complete_analysis()   -> ai_analyzed=True, may force private when sensitive
    fail_analysis()       -> ai_analyzed=True, nothing else touched
    request_reanalysis()  -> ai_analyzed=False
"""

import os
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint, Column, Text, String, Boolean, BigInteger, DateTime, ForeignKey, Uuid, Index,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, utcnow
from ..domain.documents.visibility import Visibility, generate_public_token, public_path
from ..domain.documents.sensitivity import Sensitivity, DEFAULT_SENSITIVITY
from ..errors import SensitiveDocumentError

if TYPE_CHECKING:
    from ..analysis.schemas.analysis_output import AnalysisResult


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Document(Base):
    """Document model representing an uploaded file.

    Each document belongs to exactly one user. The backing bytes live in the
    blob store at (storage_disk, storage_path); both are immutable after upload.
    Sensitive documents are never public: publish() refuses them and
    complete_analysis() unpublishes them in the same update.
    """
    __tablename__ = "document"
    __table_args__ = (
        Index("ix_document_user_id", "user_id"),
        Index("ix_document_visibility", "visibility"),
        CheckConstraint(
            "NOT (sensitivity = 'sensitive' AND visibility = 'public')",
            name="ck_document_sensitive_private",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    original_name = Column(Text, nullable=False)
    mime_type = Column(Text, nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    storage_disk = Column(Text, nullable=False)
    storage_path = Column(Text, nullable=False)
    visibility = Column(
        SQLEnum(Visibility, name="visibility", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=Visibility.PRIVATE,
    )
    public_token = Column(String(64), nullable=True, unique=True)
    public_enabled_at = Column(DateTime(timezone=True), nullable=True)
    public_disabled_at = Column(DateTime(timezone=True), nullable=True)
    title = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    tags = Column(PortableJSONB, nullable=True)
    ai_summary = Column(Text, nullable=True)
    sensitivity = Column(
        SQLEnum(Sensitivity, name="sensitivity", native_enum=False, values_callable=_enum_values),
        nullable=True,
    )
    ai_analyzed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    owner = relationship("User", back_populates="documents")
    shares = relationship("DocumentShare", back_populates="document", cascade="all, delete-orphan")

    # -- state queries -------------------------------------------------------

    def is_owned_by(self, user) -> bool:
        return user is not None and self.user_id == user.id

    def is_public(self) -> bool:
        return self.visibility == Visibility.PUBLIC

    def is_private(self) -> bool:
        return self.visibility == Visibility.PRIVATE

    def is_sensitive(self) -> bool:
        return self.sensitivity == Sensitivity.SENSITIVE

    def is_maybe_sensitive(self) -> bool:
        return self.sensitivity == Sensitivity.MAYBE_SENSITIVE

    # -- transitions ---------------------------------------------------------

    def publish(self, now: Optional[datetime] = None) -> str:
        """Make the document public.

        The token is generated on first publish only; later publishes reuse it.

        Args:
            now: Transition timestamp (defaults to current UTC time)

        Returns:
            The public token

        Raises:
            SensitiveDocumentError: If the document is classified sensitive
        """
        if self.is_sensitive():
            raise SensitiveDocumentError()

        if not self.public_token:
            self.public_token = generate_public_token()

        self.visibility = Visibility.PUBLIC
        self.public_enabled_at = now or utcnow()
        self.public_disabled_at = None
        return self.public_token

    def unpublish(self, now: Optional[datetime] = None) -> None:
        """Make the document private. Token and public_enabled_at are left untouched."""
        self.visibility = Visibility.PRIVATE
        self.public_disabled_at = now or utcnow()

    def complete_analysis(
        self,
        result: "AnalysisResult",
        force_update: bool = False,
        now: Optional[datetime] = None,
    ) -> None:
        """Apply a classification result (merge rule + sensitive lock).

        title, description and tags are written only when the AI value is non-empty
        and either force_update is set or the current field is empty. The summary is
        always replaced when the AI returned one. A sensitive result on a public
        document unpublishes it within this same update.

        Args:
            result: Normalized analysis result
            force_update: Overwrite user-authored title/description/tags
            now: Transition timestamp for a forced unpublish
        """
        self.ai_analyzed = True
        self.sensitivity = result.sensitivity or DEFAULT_SENSITIVITY

        if result.summary:
            self.ai_summary = result.summary

        if result.title and (force_update or not self.title):
            self.title = result.title

        if result.description and (force_update or not self.description):
            self.description = result.description

        if result.tags and (force_update or not self.tags):
            self.tags = list(result.tags)

        if self.is_sensitive() and self.is_public():
            self.unpublish(now)

    def fail_analysis(self) -> None:
        """Terminal analysis failure: mark analyzed, leave every other field alone."""
        self.ai_analyzed = True

    def request_reanalysis(self) -> None:
        """Re-enter the pending state; previous classification stays until replaced."""
        self.ai_analyzed = False

    # -- derived attributes --------------------------------------------------

    @property
    def extension(self) -> str:
        """Lower-case file extension of the original name ('' when absent)"""
        return os.path.splitext(self.original_name or "")[1].lstrip(".").lower()

    @property
    def formatted_size(self) -> str:
        """Human readable size (B, KB, MB, GB)"""
        size = self.size_bytes or 0
        if size < 1024:
            return f"{size} B"
        if size < 1024 ** 2:
            return f"{round(size / 1024, 1):g} KB"
        if size < 1024 ** 3:
            return f"{round(size / 1024 ** 2, 1):g} MB"
        return f"{round(size / 1024 ** 3, 1):g} GB"

    @property
    def display_title(self) -> str:
        return self.title or self.original_name

    def public_url(self, base_url: str) -> Optional[str]:
        """Canonical public URL, or None unless the document is public"""
        if not self.is_public():
            return None
        path = public_path(self.public_token)
        if path is None:
            return None
        return base_url.rstrip("/") + path

    def to_searchable_dict(self):
        """Flat projection consumed by the full-text index"""
        return {
            "title": self.title,
            "original_name": self.original_name,
            "description": self.description,
            "ai_summary": self.ai_summary,
            "tags": " ".join(self.tags or []),
        }

    def to_dict(self):
        """Convert document to dictionary representation"""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "original_name": self.original_name,
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "formatted_size": self.formatted_size,
            "visibility": self.visibility.value if self.visibility else None,
            "public_enabled_at": self.public_enabled_at.isoformat() if self.public_enabled_at else None,
            "public_disabled_at": self.public_disabled_at.isoformat() if self.public_disabled_at else None,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags or []),
            "ai_summary": self.ai_summary,
            "sensitivity": self.sensitivity.value if self.sensitivity else None,
            "ai_analyzed": bool(self.ai_analyzed),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
