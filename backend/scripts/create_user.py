#!/usr/bin/env python
"""Create a docshelf account and print an access token for it.

Accounts are what share recipients are looked up by, so every person who
should receive shared documents needs one.

Usage:
    USER_EMAIL=bob@example.com USER_NAME="Bob" python backend/scripts/create_user.py

Environment Variables:
    DATABASE_URL: Database connection string (see docshelf.config)
    SECRET_KEY: JWT signing key, needed for the printed token
    USER_EMAIL: Email for the account (required)
    USER_NAME: Display name (required)
    TOKEN_EXPIRE_MINUTES: Lifetime of the printed token (default: ACCESS_TOKEN_EXPIRE_MINUTES)
"""

import os
import sys

from docshelf.auth.jwt import create_access_token
from docshelf.database import SessionLocal
from docshelf.errors import DocshelfError
from docshelf.users.service import create_user


def main() -> int:
    """Create the account described by the environment."""
    email = os.getenv("USER_EMAIL")
    name = os.getenv("USER_NAME")
    if not email or not name:
        print("ERROR: USER_EMAIL and USER_NAME environment variables are required")
        print('Example: USER_EMAIL=bob@example.com USER_NAME="Bob" python create_user.py')
        return 1

    expires = os.getenv("TOKEN_EXPIRE_MINUTES")
    try:
        expires_minutes = int(expires) if expires else None
    except ValueError:
        print(f"ERROR: Invalid TOKEN_EXPIRE_MINUTES: {expires}")
        return 1

    session = SessionLocal()
    try:
        user = create_user(session, email, name)
    except DocshelfError as e:
        print(f"ERROR: {e.message}")
        return 1
    finally:
        session.close()

    print("SUCCESS: Account created")
    print(f"  ID:    {user.id}")
    print(f"  Email: {user.email}")
    print(f"  Name:  {user.name}")
    print(f"  Token: {create_access_token(user_id=user.id, email=user.email, expires_minutes=expires_minutes)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
