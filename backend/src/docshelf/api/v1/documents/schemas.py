"""Document API schemas - Request/response models for document endpoints.

Pydantic models for type-safe API request/response handling.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ....domain.documents.sensitivity import Sensitivity
from ....domain.documents.validation import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TAGS,
    MAX_TITLE_LENGTH,
)
from ....domain.documents.visibility import Visibility


class DocumentResponse(BaseModel):
    """Document metadata as returned to owners and grantees.

    Attributes:
        id: Document UUID
        user_id: Owner UUID
        original_name: Filename as uploaded
        mime_type: Declared media type
        size_bytes: Size in bytes
        formatted_size: Human readable size
        visibility: private or public
        title/description/tags: Descriptive metadata
        ai_summary: AI-generated summary
        sensitivity: null until the first analysis completes
        ai_analyzed: Whether analysis has finished
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    original_name: str
    mime_type: str
    size_bytes: int
    formatted_size: str
    visibility: Visibility
    public_enabled_at: Optional[datetime] = None
    public_disabled_at: Optional[datetime] = None
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    ai_summary: Optional[str] = None
    sensitivity: Optional[Sensitivity] = None
    ai_analyzed: bool
    created_at: datetime
    updated_at: datetime


class ShareRecipientResponse(BaseModel):
    """A recipient of a document (owner's view)."""
    id: UUID
    name: str
    email: str
    can_download: bool


class DocumentDetailResponse(BaseModel):
    """Single document view with caller-specific flags.

    Attributes:
        document: Document metadata
        is_owner: Caller owns the document
        can_download: Caller may download the file
        public_url: Public link (public documents only)
        qr_code: data:image/svg+xml QR code for the public link
        shared_with: Recipients (owner only, empty otherwise)
    """
    document: DocumentResponse
    is_owner: bool
    can_download: bool
    public_url: Optional[str] = None
    qr_code: Optional[str] = None
    shared_with: List[ShareRecipientResponse] = Field(default_factory=list)


class DocumentListResponse(BaseModel):
    """Paginated list of owned documents."""
    items: List[DocumentResponse]
    total: int
    page: int
    per_page: int
    shared_count: int


class OwnerIdentity(BaseModel):
    id: UUID
    name: str


class SharedDocumentResponse(BaseModel):
    """A document shared with the caller, with its owner's identity."""
    document: DocumentResponse
    owner: OwnerIdentity
    can_download: bool


class SharedDocumentListResponse(BaseModel):
    items: List[SharedDocumentResponse]
    total: int


class DocumentUpdateRequest(BaseModel):
    """PATCH body; only the fields sent are changed."""
    title: Optional[str] = Field(default=None, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    tags: Optional[List[str]] = Field(default=None, max_length=MAX_TAGS)


class ApplySuggestionsRequest(BaseModel):
    """AI suggestions accepted by the owner; empty values are ignored."""
    title: Optional[str] = Field(default=None, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    tags: Optional[List[str]] = Field(default=None, max_length=MAX_TAGS)


class ShareCreateRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    can_download: bool = True


class ShareUpdateRequest(BaseModel):
    can_download: bool


class ShareResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_id: UUID
    user_id: UUID
    shared_by: UUID
    can_download: bool
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str
