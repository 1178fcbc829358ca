"""Document API endpoints.

Provides REST API for uploading, listing, editing, downloading, publishing and
deleting documents. Every endpoint resolves the acting user from the Bearer
token and passes it explicitly to the service layer, which enforces the
authorization policy.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import StreamingResponse

from ....auth.dependencies import get_current_user
from ....config import settings
from ....dependencies import get_document_service, get_qr_code_service, get_sharing_ledger
from ....domain.documents.validation import sanitize_filename
from ....domain.documents.visibility import Visibility
from ....models.user import User
from ....policies.document_policy import DocumentAction, can_download
from ....services.document_service import DocumentService
from ....services.qr_code import QrCodeService
from ....sharing.service import SharingLedger
from .schemas import (
    ApplySuggestionsRequest,
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdateRequest,
    OwnerIdentity,
    ShareRecipientResponse,
    SharedDocumentListResponse,
    SharedDocumentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Upload a document (multipart/form-data).

    The document is stored private and unanalyzed; AI analysis is queued.

    Raises:
        422: Empty/oversized file, invalid filename, title or description
    """
    data = await file.read()
    document = await service.upload(
        actor=current_user,
        data=data,
        original_name=file.filename or "",
        mime_type=file.content_type,
        title=title,
        description=description,
    )
    return document


@router.get("", response_model=Union[DocumentListResponse, SharedDocumentListResponse])
def list_documents(
    filter_by: str = Query("owned", alias="filter", pattern="^(owned|shared)$"),
    visibility: Optional[Visibility] = Query(None),
    search: Optional[str] = Query(None, max_length=255),
    page: int = Query(1, ge=1),
    per_page: int = Query(12, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
    ledger: SharingLedger = Depends(get_sharing_ledger),
):
    """List owned documents (default) or documents shared with the caller (filter=shared)."""
    if filter_by == "shared":
        shared = ledger.shared_documents_for(current_user)
        return SharedDocumentListResponse(
            items=[
                SharedDocumentResponse(
                    document=DocumentResponse.model_validate(item.document),
                    owner=OwnerIdentity(**item.owner),
                    can_download=item.can_download,
                )
                for item in shared
            ],
            total=len(shared),
        )

    documents, total = service.list_owned(
        current_user, visibility=visibility, search=search, page=page, per_page=per_page
    )
    return DocumentListResponse(
        items=[DocumentResponse.model_validate(doc) for doc in documents],
        total=total,
        page=page,
        per_page=per_page,
        shared_count=len(ledger.shared_documents_for(current_user)),
    )


@router.get("/{document_id}", response_model=DocumentDetailResponse)
def get_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
    ledger: SharingLedger = Depends(get_sharing_ledger),
    qr_codes: QrCodeService = Depends(get_qr_code_service),
):
    """Document details for the owner or a grantee."""
    document = service.get_for_actor(current_user, document_id, DocumentAction.VIEW)
    is_owner = document.is_owned_by(current_user)

    return DocumentDetailResponse(
        document=DocumentResponse.model_validate(document),
        is_owner=is_owner,
        can_download=can_download(current_user, document),
        public_url=document.public_url(settings.APP_URL),
        qr_code=qr_codes.generate_data_uri(document),
        shared_with=[ShareRecipientResponse(**r) for r in ledger.recipients_of(document)] if is_owner else [],
    )


@router.patch("/{document_id}", response_model=DocumentResponse)
def update_document(
    document_id: UUID,
    body: DocumentUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Edit title, description and/or tags (owner only)."""
    document = service.get_for_actor(current_user, document_id, DocumentAction.UPDATE)
    return service.update_metadata(current_user, document, **body.model_dump(exclude_unset=True))


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Delete the file and its record (owner only).

    Raises:
        409: The file could not be removed from storage
    """
    document = service.get_for_actor(current_user, document_id, DocumentAction.DELETE)
    await service.delete(current_user, document)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{document_id}/download")
async def download_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Stream the file as an attachment (owner, or grantee with download permission)."""
    document = service.get_for_actor(current_user, document_id, DocumentAction.VIEW)
    download = await service.download(current_user, document)

    logger.info(f"Document downloaded: id={document_id}", extra={"document_id": document_id})
    return StreamingResponse(
        download.chunks,
        media_type=download.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{sanitize_filename(download.filename)}"',
            "Content-Length": str(download.size_bytes),
        },
    )


@router.post("/{document_id}/make-public", response_model=DocumentDetailResponse)
def make_public(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
    ledger: SharingLedger = Depends(get_sharing_ledger),
    qr_codes: QrCodeService = Depends(get_qr_code_service),
):
    """Publish the document at /p/{token} (owner only, never for sensitive documents)."""
    document = service.get_for_actor(current_user, document_id, DocumentAction.VIEW)
    service.publish(current_user, document)

    return DocumentDetailResponse(
        document=DocumentResponse.model_validate(document),
        is_owner=True,
        can_download=True,
        public_url=document.public_url(settings.APP_URL),
        qr_code=qr_codes.generate_data_uri(document),
        shared_with=[ShareRecipientResponse(**r) for r in ledger.recipients_of(document)],
    )


@router.post("/{document_id}/make-private", response_model=DocumentResponse)
def make_private(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Unpublish the document; the public link stops working until republished."""
    document = service.get_for_actor(current_user, document_id, DocumentAction.VIEW)
    return service.unpublish(current_user, document)


@router.post("/{document_id}/apply-suggestions", response_model=DocumentResponse)
def apply_suggestions(
    document_id: UUID,
    body: ApplySuggestionsRequest,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Apply accepted AI suggestions (non-empty fields only)."""
    document = service.get_for_actor(current_user, document_id, DocumentAction.UPDATE)
    return service.apply_suggestions(
        current_user, document, title=body.title, description=body.description, tags=body.tags
    )


@router.post("/{document_id}/reanalyze", response_model=DocumentResponse, status_code=status.HTTP_202_ACCEPTED)
def reanalyze(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    """Queue a forced re-analysis that may overwrite title, description and tags."""
    document = service.get_for_actor(current_user, document_id, DocumentAction.UPDATE)
    return service.request_reanalysis(current_user, document)
