"""Document visibility states and public token generation

Visibility flow:
    PRIVATE --publish()--> PUBLIC --unpublish()--> PRIVATE

The public token is generated on the first publish and reused by every later
publish, so a link handed out once keeps working after a private/public round trip.
"""

import secrets
import string
from enum import Enum
from typing import Optional


class Visibility(str, Enum):
    """Document visibility enum

    PRIVATE: owner and share grantees only
    PUBLIC: anyone holding the public token (/p/{token})
    """
    PRIVATE = "private"
    PUBLIC = "public"


PUBLIC_TOKEN_LENGTH = 64

PUBLIC_TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_public_token(length: int = PUBLIC_TOKEN_LENGTH) -> str:
    """Generate a high-entropy public token

    Uses the secrets module (CSPRNG); 64 characters over a 62-symbol
    alphabet gives roughly 381 bits of entropy.

    Args:
        length: Token length (default 64, matches the column width)

    Returns:
        Random alphanumeric token

    Example:
        >>> len(generate_public_token())
        64
    """
    return "".join(secrets.choice(PUBLIC_TOKEN_ALPHABET) for _ in range(length))


def public_path(token: Optional[str]) -> Optional[str]:
    """Return the relative public path for a token (/p/{token}), or None"""
    if not token:
        return None
    return f"/p/{token}"
