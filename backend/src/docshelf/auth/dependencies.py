"""FastAPI dependencies for authentication.

get_current_user resolves the acting user from the Bearer token. Routes pass
that user explicitly into every service call; nothing below the HTTP layer
looks up a "current" user on its own.

Usage:
    @router.get("/documents")
    def list_documents(user: User = Depends(get_current_user)):
        ...
"""

from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from .jwt import decode_token

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Return the user named by the token's sub claim.

    Raises:
        HTTPException 401: Expired, invalid or tampered token, or unknown user
    """
    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(f"Invalid token: {e}")

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Invalid token: missing user ID claim")
    try:
        user_id = UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token: sub is not a user ID")

    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user
