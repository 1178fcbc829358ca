"""AI domain layer - Port and value types for the document classifier"""

from .ports import (
    AttachmentKind,
    ClassifierAttachment,
    ClassifierResponse,
    DocumentClassifierPort,
    LLMError,
    LLMTimeoutError,
    LLMRateLimitError,
    LLMAuthError,
    LLMServiceError,
    LLMInvalidResponseError,
)

__all__ = [
    "AttachmentKind",
    "ClassifierAttachment",
    "ClassifierResponse",
    "DocumentClassifierPort",
    "LLMError",
    "LLMTimeoutError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMServiceError",
    "LLMInvalidResponseError",
]
