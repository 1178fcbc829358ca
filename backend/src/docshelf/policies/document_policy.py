"""Document authorization policy.

Pure, side-effect-free predicates over (actor, document). Every mutating
operation calls authorize() at its boundary before touching any state.

| Action             | Rule                                                   |
|--------------------|--------------------------------------------------------|
| view               | owner, or any share grant exists for actor             |
| create             | any authenticated actor                                |
| update / delete    | owner                                                  |
| download           | owner, or a grant with can_download                    |
| share              | owner                                                  |
| change_visibility  | owner and the document is not classified sensitive     |
"""

from enum import Enum
from typing import Optional

from ..errors import AuthorizationError
from ..models.document import Document
from ..models.document_share import DocumentShare
from ..models.user import User


class DocumentAction(str, Enum):
    """Actions gated by the policy."""
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    DOWNLOAD = "download"
    SHARE = "share"
    CHANGE_VISIBILITY = "change_visibility"


def find_grant(document: Document, user: Optional[User]) -> Optional[DocumentShare]:
    """Return the share grant naming user on document, if any."""
    if user is None:
        return None
    for share in document.shares:
        if share.user_id == user.id:
            return share
    return None


def is_owner(actor: Optional[User], document: Document) -> bool:
    return document.is_owned_by(actor)


def can_view(actor: Optional[User], document: Document) -> bool:
    return is_owner(actor, document) or find_grant(document, actor) is not None


def can_create(actor: Optional[User]) -> bool:
    return actor is not None


def can_update(actor: Optional[User], document: Document) -> bool:
    return is_owner(actor, document)


def can_delete(actor: Optional[User], document: Document) -> bool:
    return is_owner(actor, document)


def can_download(actor: Optional[User], document: Document) -> bool:
    if is_owner(actor, document):
        return True
    grant = find_grant(document, actor)
    return grant is not None and bool(grant.can_download)


def can_share(actor: Optional[User], document: Document) -> bool:
    return is_owner(actor, document)


def can_change_visibility(actor: Optional[User], document: Document) -> bool:
    return is_owner(actor, document) and not document.is_sensitive()


_RULES = {
    DocumentAction.VIEW: can_view,
    DocumentAction.UPDATE: can_update,
    DocumentAction.DELETE: can_delete,
    DocumentAction.DOWNLOAD: can_download,
    DocumentAction.SHARE: can_share,
    DocumentAction.CHANGE_VISIBILITY: can_change_visibility,
}


def allows(actor: Optional[User], action: DocumentAction, document: Optional[Document] = None) -> bool:
    """Evaluate the rule for action.

    Args:
        actor: Acting user (None for anonymous)
        action: Action being attempted
        document: Target document (not needed for CREATE)

    Returns:
        bool: True if the action is permitted
    """
    if action == DocumentAction.CREATE:
        return can_create(actor)
    if document is None:
        return False
    return _RULES[action](actor, document)


def authorize(actor: Optional[User], action: DocumentAction, document: Optional[Document] = None) -> None:
    """Raise AuthorizationError unless actor may perform action.

    Example:
        authorize(user, DocumentAction.SHARE, document)
        ledger.grant(document, "bob@example.com", granted_by=user)
    """
    if not allows(actor, action, document):
        raise AuthorizationError()
