"""SQLAlchemy models for docshelf"""

from .base import Base, PortableJSONB, utcnow
from .user import User
from .document import Document
from .document_share import DocumentShare

__all__ = [
    "Base",
    "PortableJSONB",
    "utcnow",
    "User",
    "Document",
    "DocumentShare",
]
