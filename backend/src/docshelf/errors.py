"""Domain exception hierarchy.

Every error that may reach an API caller derives from DocshelfError and carries
the HTTP status it maps to plus a stable machine-readable code. Exception
handlers in main.py translate them into JSON responses.
"""

from typing import Optional


class DocshelfError(Exception):
    """Base exception for docshelf domain errors."""

    status_code: int = 400
    code: str = "docshelf_error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = message or self.__class__.__doc__ or self.code


class DocumentValidationError(DocshelfError):
    """Request data failed validation"""
    status_code = 422
    code = "validation_error"


class AuthorizationError(DocshelfError):
    """This action is unauthorized"""
    status_code = 403
    code = "forbidden"


class DocumentNotFoundError(DocshelfError):
    """Document not found"""
    status_code = 404
    code = "not_found"


class SensitiveDocumentError(DocshelfError):
    """Sensitive documents cannot be made public"""
    status_code = 409
    code = "sensitive_document"


class StorageInconsistencyError(DocshelfError):
    """Document file could not be removed from storage"""
    status_code = 409
    code = "storage_inconsistency"


class SharingError(DocshelfError):
    """Base class for share ledger errors"""
    code = "sharing_error"


class AlreadyGrantedError(SharingError):
    """Document is already shared with this user"""
    status_code = 409
    code = "already_granted"


class SelfShareError(SharingError):
    """You cannot share a document with yourself"""
    status_code = 422
    code = "self_share"


class RecipientNotFoundError(SharingError):
    """No user found with this email address"""
    status_code = 422
    code = "recipient_not_found"


class GrantNotFoundError(SharingError):
    """Document is not shared with this user"""
    status_code = 404
    code = "grant_not_found"


class AccountExistsError(DocshelfError):
    """An account with this email already exists"""
    status_code = 409
    code = "account_exists"
