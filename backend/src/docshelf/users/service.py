"""Account provisioning.

Authentication happens outside docshelf, so accounts are created by an operator
(backend/scripts/create_user.py). An account only needs a unique email, which
share recipients are looked up by, and a display name.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import AccountExistsError, DocumentValidationError
from ..models.user import User
from ..sharing.service import EMAIL_PATTERN

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255


def create_user(session: Session, email: str, name: str) -> User:
    """Create and commit an account.

    Args:
        session: Database session
        email: Login and share-lookup email (stored lowercased)
        name: Display name shown to share recipients

    Returns:
        User: The committed account

    Raises:
        DocumentValidationError: Malformed email or empty/oversized name
        AccountExistsError: Email already taken
    """
    email = (email or "").strip().lower()
    name = (name or "").strip()

    if not EMAIL_PATTERN.match(email):
        raise DocumentValidationError("The email must be a valid email address.")
    if not name:
        raise DocumentValidationError("The name field is required.")
    if len(name) > MAX_NAME_LENGTH:
        raise DocumentValidationError(f"The name may not be greater than {MAX_NAME_LENGTH} characters.")

    if session.scalars(select(User).where(User.email == email)).first() is not None:
        raise AccountExistsError()

    user = User(email=email, name=name)
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        # Lost a race against a concurrent insert of the same email
        session.rollback()
        raise AccountExistsError() from e

    logger.info(f"Account created: {user.id}", extra={"user_id": user.id})
    return user
