"""
Document Classifier Port - Abstract interface for the AI classifier.

Hexagonal Architecture: This is a domain port that infrastructure adapters implement.
The analysis orchestrator depends on this port, not on a concrete provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class AttachmentKind(str, Enum):
    """Kind of binary attachment sent alongside the prompt."""
    IMAGE = "image"
    DOCUMENT = "document"


@dataclass
class ClassifierAttachment:
    """
    Binary attachment for the classifier.

    Attributes:
        kind: IMAGE for image/* media types, DOCUMENT for everything else
        data: Raw file bytes
        mime_type: Declared media type of the file
        filename: Original filename (some providers require one for documents)
    """
    kind: AttachmentKind
    data: bytes
    mime_type: str
    filename: str


@dataclass
class ClassifierResponse:
    """
    Raw response from a classifier call.

    The payload is untrusted: the orchestrator validates and normalizes
    parsed_json into an AnalysisResult before anything touches a Document.

    Attributes:
        raw_output: Raw string response from the model
        parsed_json: Parsed JSON dict if successful, None if parsing failed
        provider: Provider name (e.g., 'openai')
        model: Model name (e.g., 'gpt-4o-mini')
        latency_ms: Latency in milliseconds
        warnings: List of non-critical warnings
    """
    raw_output: str
    parsed_json: Optional[dict]
    provider: str
    model: str
    latency_ms: int = 0
    warnings: list[str] = field(default_factory=list)


class DocumentClassifierPort(ABC):
    """
    Abstract interface for document classifiers.

    Implementations must handle:
    - API authentication
    - Request formatting for provider (system instructions + structured output)
    - Attachment encoding
    - Error handling (timeouts, rate limits, invalid responses)
    """

    @abstractmethod
    def classify(
        self,
        prompt: str,
        attachment: Optional[ClassifierAttachment] = None,
    ) -> ClassifierResponse:
        """
        Classify a document described by prompt (and optionally an attachment).

        Args:
            prompt: Context prompt (filename, type, size and, for text files, content)
            attachment: Optional binary attachment (image or generic document)

        Returns:
            ClassifierResponse with title/description/tags/summary/sensitivity JSON

        Raises:
            LLMTimeoutError: Request timed out
            LLMRateLimitError: Rate limit exceeded
            LLMAuthError: Authentication failed
            LLMServiceError: Provider service unavailable
        """
        pass


# Custom exceptions for classifier operations
class LLMError(Exception):
    """Base exception for LLM operations"""
    pass


class LLMTimeoutError(LLMError):
    """LLM request timed out"""
    pass


class LLMRateLimitError(LLMError):
    """Rate limit exceeded"""
    pass


class LLMAuthError(LLMError):
    """Authentication failed"""
    pass


class LLMServiceError(LLMError):
    """Provider service unavailable or returned error"""
    pass


class LLMInvalidResponseError(LLMError):
    """Provider returned invalid/unexpected response"""
    pass
