"""Sharing ledger - user-to-user document grants.

A grant is a directed edge (document -> recipient) carrying a download flag.
At most one grant exists per pair; re-sharing goes through update_grant().
Callers authorize DocumentAction.SHARE before any mutating call.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..errors import (
    AlreadyGrantedError,
    DocumentValidationError,
    GrantNotFoundError,
    RecipientNotFoundError,
    SelfShareError,
)
from ..models.document import Document
from ..models.document_share import DocumentShare
from ..models.user import User
from ..observability.metrics import share_grant_operations_total
from ..policies.document_policy import find_grant, can_download as policy_can_download

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


@dataclass
class SharedDocument:
    """A document shared with a user, paired with its owner's public identity."""
    document: Document
    owner: dict
    can_download: bool


class SharingLedger:
    """Grant, update and revoke share grants; answer sharing queries.

    Example:
        ledger = SharingLedger(db)
        authorize(owner, DocumentAction.SHARE, document)
        ledger.grant(document, "bob@example.com", granted_by=owner, can_download=False)
        ledger.can_download(document, bob)   # False
    """

    def __init__(self, session: Session):
        self.session = session

    def resolve_recipient(self, email: str) -> User:
        """Look up the recipient account by email.

        Raises:
            DocumentValidationError: Malformed email
            RecipientNotFoundError: No account with that email
        """
        email = (email or "").strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise DocumentValidationError("The email must be a valid email address.")

        recipient = self.session.scalars(select(User).where(User.email == email)).first()
        if recipient is None:
            raise RecipientNotFoundError()
        return recipient

    def grant(
        self,
        document: Document,
        recipient_email: str,
        granted_by: User,
        can_download: bool = True,
    ) -> DocumentShare:
        """Share document with the account behind recipient_email.

        Args:
            document: Document owned by granted_by
            recipient_email: Email of an existing account
            granted_by: Acting owner
            can_download: Download permission (defaults to True)

        Returns:
            The created DocumentShare

        Raises:
            RecipientNotFoundError: Email does not resolve to an account
            SelfShareError: Recipient is the owner (or the granting user)
            AlreadyGrantedError: A grant already exists for this pair
        """
        recipient = self.resolve_recipient(recipient_email)

        if recipient.id == document.user_id or recipient.id == granted_by.id:
            share_grant_operations_total.labels(operation="grant", status="self_share").inc()
            raise SelfShareError()

        if find_grant(document, recipient) is not None:
            share_grant_operations_total.labels(operation="grant", status="already_granted").inc()
            raise AlreadyGrantedError()

        share = DocumentShare(
            document_id=document.id,
            user_id=recipient.id,
            shared_by=granted_by.id,
            can_download=can_download,
        )
        document.shares.append(share)
        try:
            self.session.commit()
        except IntegrityError:
            # unique (document_id, user_id) lost a race with a concurrent grant
            self.session.rollback()
            share_grant_operations_total.labels(operation="grant", status="already_granted").inc()
            raise AlreadyGrantedError()

        share_grant_operations_total.labels(operation="grant", status="success").inc()
        logger.info(
            f"Document {document.id} shared with user {recipient.id} (can_download={can_download})",
            extra={"document_id": document.id, "user_id": granted_by.id},
        )
        return share

    def update_grant(self, document: Document, recipient: Optional[User], can_download: bool) -> DocumentShare:
        """Set the download flag on an existing grant (idempotent).

        Raises:
            GrantNotFoundError: No grant exists for this pair
        """
        share = find_grant(document, recipient)
        if share is None:
            share_grant_operations_total.labels(operation="update", status="not_found").inc()
            raise GrantNotFoundError()

        share.can_download = can_download
        self.session.commit()

        share_grant_operations_total.labels(operation="update", status="success").inc()
        logger.info(
            f"Share permissions updated: document={document.id}, user={recipient.id}, "
            f"can_download={can_download}",
            extra={"document_id": document.id},
        )
        return share

    def revoke(self, document: Document, recipient: Optional[User]) -> bool:
        """Remove the grant for this pair.

        Returns:
            bool: True if a grant was removed, False if none existed
        """
        share = find_grant(document, recipient)
        if share is None:
            share_grant_operations_total.labels(operation="revoke", status="not_found").inc()
            return False

        document.shares.remove(share)
        self.session.commit()

        share_grant_operations_total.labels(operation="revoke", status="success").inc()
        logger.info(
            f"Sharing of document {document.id} with user {recipient.id} removed",
            extra={"document_id": document.id},
        )
        return True

    def can_download(self, document: Document, user: Optional[User]) -> bool:
        """Owner always; otherwise only with a grant whose can_download is set."""
        return policy_can_download(user, document)

    def is_shared_with(self, document: Document, user: Optional[User]) -> bool:
        """True iff any grant exists for the pair, regardless of download permission."""
        return find_grant(document, user) is not None

    def shared_documents_for(self, user: User) -> List[SharedDocument]:
        """All documents shared with user, newest grant first, with owner identity."""
        stmt = (
            select(DocumentShare)
            .options(joinedload(DocumentShare.document).joinedload(Document.owner))
            .where(DocumentShare.user_id == user.id)
            .order_by(DocumentShare.created_at.desc())
        )
        return [
            SharedDocument(
                document=share.document,
                owner=share.document.owner.public_identity(),
                can_download=bool(share.can_download),
            )
            for share in self.session.scalars(stmt)
        ]

    def recipients_of(self, document: Document) -> List[dict]:
        """Recipients of document for the owner's view."""
        return [
            {
                "id": str(share.recipient.id),
                "name": share.recipient.name,
                "email": share.recipient.email,
                "can_download": bool(share.can_download),
            }
            for share in document.shares
        ]
