"""Anonymous access to public documents by token."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.documents.visibility import Visibility
from ..errors import DocumentNotFoundError
from ..models.document import Document

logger = logging.getLogger(__name__)


class PublicDocumentService:
    """Resolve public tokens.

    An unknown token and a token for a private document raise the same
    DocumentNotFoundError, so callers cannot tell the two apart.
    """

    def __init__(self, session: Session):
        self.session = session

    def resolve(self, token: str) -> Document:
        """Return the public document for token.

        Raises:
            DocumentNotFoundError: Unknown token or document not public
        """
        if not token:
            raise DocumentNotFoundError()

        document = self.session.scalars(
            select(Document).where(
                Document.public_token == token,
                Document.visibility == Visibility.PUBLIC,
            )
        ).first()

        if document is None:
            raise DocumentNotFoundError()
        return document
