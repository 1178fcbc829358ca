"""Document share endpoints (owner only).

Grants are keyed by (document, recipient). Re-sharing an existing pair is
rejected; use PATCH to change the download permission.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ....auth.dependencies import get_current_user
from ....database import get_db
from ....dependencies import get_document_service, get_sharing_ledger
from ....errors import GrantNotFoundError
from ....models.user import User
from ....policies.document_policy import DocumentAction
from ....services.document_service import DocumentService
from ....sharing.service import SharingLedger
from .schemas import ShareCreateRequest, ShareResponse, ShareUpdateRequest

router = APIRouter(prefix="/documents/{document_id}/shares", tags=["shares"])


@router.post("", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
def create_share(
    document_id: UUID,
    body: ShareCreateRequest,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
    ledger: SharingLedger = Depends(get_sharing_ledger),
):
    """Share a document with another account by email.

    Raises:
        409: Already shared with this user
        422: Unknown recipient email or sharing with yourself
    """
    document = service.get_for_actor(current_user, document_id, DocumentAction.SHARE)
    return ledger.grant(
        document,
        body.email,
        granted_by=current_user,
        can_download=body.can_download,
    )


@router.patch("/{user_id}", response_model=ShareResponse)
def update_share(
    document_id: UUID,
    user_id: UUID,
    body: ShareUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
    ledger: SharingLedger = Depends(get_sharing_ledger),
    db: Session = Depends(get_db),
):
    """Change the download permission of an existing grant."""
    document = service.get_for_actor(current_user, document_id, DocumentAction.SHARE)
    recipient = db.get(User, user_id)
    return ledger.update_grant(document, recipient, can_download=body.can_download)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_share(
    document_id: UUID,
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
    ledger: SharingLedger = Depends(get_sharing_ledger),
    db: Session = Depends(get_db),
):
    """Revoke a grant.

    Raises:
        404: The document is not shared with this user
    """
    document = service.get_for_actor(current_user, document_id, DocumentAction.SHARE)
    recipient = db.get(User, user_id)
    if not ledger.revoke(document, recipient):
        raise GrantNotFoundError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
