"""DocumentShare SQLAlchemy model

A share grant is a directed permission edge from a Document to a recipient User.
At most one grant exists per (document, recipient) pair.
"""

import uuid

from sqlalchemy import Column, Boolean, DateTime, ForeignKey, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class DocumentShare(Base):
    """Share grant giving one user view (and optionally download) access to a document."""
    __tablename__ = "document_share"
    __table_args__ = (
        UniqueConstraint("document_id", "user_id", name="uq_document_share_document_user"),
        Index("ix_document_share_user_id", "user_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id = Column(Uuid, ForeignKey("document.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    shared_by = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    can_download = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    document = relationship("Document", back_populates="shares")
    recipient = relationship("User", foreign_keys=[user_id])
    granted_by = relationship("User", foreign_keys=[shared_by])

    def to_dict(self):
        """Convert share grant to dictionary representation"""
        return {
            "document_id": str(self.document_id),
            "user_id": str(self.user_id),
            "shared_by": str(self.shared_by),
            "can_download": self.can_download,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
