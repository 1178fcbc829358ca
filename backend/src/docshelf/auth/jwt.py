"""JWT token generation and validation

Authentication (login, passwords, sessions) lives outside docshelf. The API only
validates Bearer tokens issued with the shared SECRET_KEY.

JWT Token Claims:
- sub: User ID as UUID string (the acting user for every core operation)
- email: User's email address (informational)
- iat / exp: Issued-at and expiration Unix timestamps

Security Properties:
- Algorithm: HS256 by default (JWT_ALGORITHM)
- Stateless validation; the user row is loaded afterwards to confirm it exists

Example Token Payload:
{
  "sub": "550e8400-e29b-41d4-a716-446655440000",
  "email": "alice@example.com",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import jwt

from ..config import settings


def create_access_token(
    user_id: UUID,
    email: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token for user_id.

    Args:
        user_id: User's UUID (becomes the sub claim)
        email: Optional email claim
        expires_minutes: Token lifetime (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        str: Signed JWT token
    """
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
