"""Document analyzer - strategy selection and classifier invocation.

Implements the three classification strategies, first match wins:

1. TEXT: the media type or extension is a known plain-text family. The blob is
   decoded, truncated to the character budget and inlined into the prompt.
2. ATTACHMENT: the blob exists in storage. It is sent to the classifier as an
   image (image/*) or a generic document attachment plus a context prompt.
3. METADATA: the blob is missing (or a text blob is empty). A deterministic
   result is synthesized from filename/extension/media type. The classifier
   is never called and this strategy never fails.

Every error while obtaining a classification (storage failure, classifier
error, malformed response) surfaces as AnalysisFailedError.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from ..domain.ai.ports import (
    AttachmentKind,
    ClassifierAttachment,
    DocumentClassifierPort,
    LLMError,
)
from ..domain.documents.ports.object_storage_port import BlobStorePort, StorageError
from ..domain.documents.sensitivity import Sensitivity
from ..models.document import Document
from ..observability.metrics import classifier_latency_ms
from .prompts import build_attachment_analysis_prompt, build_text_analysis_prompt
from .schemas.analysis_output import AnalysisResult

logger = logging.getLogger(__name__)

TEXT_MIME_TYPES = frozenset({
    "text/plain",
    "text/markdown",
    "text/html",
    "text/css",
    "text/csv",
    "application/json",
    "application/xml",
    "text/xml",
})

TEXT_EXTENSIONS = frozenset({
    "md", "txt", "json", "xml", "csv", "html", "css",
    "js", "ts", "php", "py", "rb", "yml", "yaml",
})

DEFAULT_TEXT_CHAR_BUDGET = 10_000
TRUNCATION_MARKER = "\n\n[Content truncated...]"


class AnalysisStrategy(str, Enum):
    """How the classification was obtained."""
    TEXT = "text"
    ATTACHMENT = "attachment"
    METADATA = "metadata"


class AnalysisFailedError(Exception):
    """Classification could not be obtained for a document.

    Attributes:
        document_id: Document being analyzed
        strategy: Strategy that was running when the error occurred
    """

    def __init__(self, message: str, document_id=None, strategy: Optional[AnalysisStrategy] = None):
        super().__init__(message)
        self.document_id = document_id
        self.strategy = strategy


@dataclass
class AnalysisOutcome:
    """Result of one classification attempt."""
    result: AnalysisResult
    strategy: AnalysisStrategy
    classifier_called: bool
    latency_ms: int = 0
    provider: Optional[str] = None


def is_text_document(mime_type: Optional[str], original_name: Optional[str]) -> bool:
    """Check whether a document belongs to the plain-text family.

    Either the declared media type or the (case-insensitive) extension is enough.

    Example:
        >>> is_text_document("application/octet-stream", "setup.PY")
        True
        >>> is_text_document("application/pdf", "report.pdf")
        False
    """
    extension = os.path.splitext(original_name or "")[1].lstrip(".").lower()
    return (mime_type or "").lower() in TEXT_MIME_TYPES or extension in TEXT_EXTENSIONS


def truncate_text(content: str, budget: int = DEFAULT_TEXT_CHAR_BUDGET) -> str:
    """Keep the first `budget` characters, appending a marker when content was cut.

    Example:
        >>> truncate_text("abcdef", budget=3)
        'abc\\n\\n[Content truncated...]'
    """
    if len(content) <= budget:
        return content
    return content[:budget] + TRUNCATION_MARKER


def metadata_fallback(document: Document) -> AnalysisResult:
    """Synthesize a deterministic result from filename, extension and media type.

    Existing title/description are kept; the title otherwise comes from the base
    name with dashes/underscores turned into spaces and every word capitalized.
    Sensitivity is always SAFE.

    Example:
        quarterly_sales-report.xlsx ->
            title='Quarterly Sales Report', description='A xlsx document.',
            tags=['xlsx'], sensitivity=SAFE
    """
    base_name, extension = os.path.splitext(document.original_name or "")
    extension = extension.lstrip(".")

    if document.title is not None:
        title = document.title
    else:
        words = base_name.replace("-", " ").replace("_", " ").split(" ")
        title = " ".join(word[:1].upper() + word[1:] for word in words)

    if document.description is not None:
        description = document.description
    else:
        description = f"A {extension} document." if extension else "A document."

    return AnalysisResult(
        title=title,
        description=description,
        tags=[extension] if extension else [],
        summary=f"This is a {document.mime_type} file named {document.original_name}.",
        sensitivity=Sensitivity.SAFE,
    )


class DocumentAnalyzer:
    """Chooses a strategy for a document and obtains a normalized AnalysisResult.

    Stateless per attempt: the analyzer never writes to the document. Applying
    the result is the orchestrator's job.

    Example:
        analyzer = DocumentAnalyzer(classifier=OpenAIClassifier(...), storage=s3)
        outcome = await analyzer.classify(document)
        outcome.strategy   # AnalysisStrategy.TEXT
        outcome.result     # AnalysisResult(title=..., sensitivity=...)
    """

    def __init__(
        self,
        classifier: DocumentClassifierPort,
        storage: BlobStorePort,
        text_char_budget: int = DEFAULT_TEXT_CHAR_BUDGET,
    ):
        self.classifier = classifier
        self.storage = storage
        self.text_char_budget = text_char_budget

    async def classify(self, document: Document) -> AnalysisOutcome:
        """Run the first matching strategy for document.

        Args:
            document: Document to classify (read-only)

        Returns:
            AnalysisOutcome with the normalized result and strategy used

        Raises:
            AnalysisFailedError: Storage, classifier or response errors
        """
        try:
            if is_text_document(document.mime_type, document.original_name):
                return await self._classify_text(document)
            return await self._classify_attachment(document)
        except AnalysisFailedError:
            raise
        except Exception as e:
            logger.exception(
                f"Unexpected error while analyzing document {document.id}",
                extra={"document_id": document.id},
            )
            raise AnalysisFailedError(
                f"Unexpected error while analyzing document {document.id}: {e}",
                document_id=document.id,
            ) from e

    async def _classify_text(self, document: Document) -> AnalysisOutcome:
        content = await self._read_blob(document, AnalysisStrategy.TEXT)
        text = content.decode("utf-8", errors="replace") if content else ""

        if not text.strip():
            logger.info(
                f"Text document {document.id} is empty or missing, using metadata fallback",
                extra={"document_id": document.id, "strategy": AnalysisStrategy.METADATA.value},
            )
            return self._metadata_outcome(document)

        prompt = build_text_analysis_prompt(
            original_name=document.original_name,
            mime_type=document.mime_type,
            formatted_size=document.formatted_size,
            content=truncate_text(text, self.text_char_budget),
        )
        return self._call_classifier(document, prompt, None, AnalysisStrategy.TEXT)

    async def _classify_attachment(self, document: Document) -> AnalysisOutcome:
        try:
            blob_exists = await self.storage.exists(document.storage_path)
        except StorageError as e:
            raise AnalysisFailedError(
                f"Storage check failed for document {document.id}: {e}",
                document_id=document.id,
                strategy=AnalysisStrategy.ATTACHMENT,
            ) from e

        if not blob_exists:
            logger.info(
                f"Blob for document {document.id} not found, using metadata fallback",
                extra={"document_id": document.id, "strategy": AnalysisStrategy.METADATA.value},
            )
            return self._metadata_outcome(document)

        data = await self._read_blob(document, AnalysisStrategy.ATTACHMENT)
        if data is None:
            return self._metadata_outcome(document)

        mime_type = document.mime_type or "application/octet-stream"
        kind = AttachmentKind.IMAGE if mime_type.startswith("image/") else AttachmentKind.DOCUMENT
        attachment = ClassifierAttachment(
            kind=kind,
            data=data,
            mime_type=mime_type,
            filename=document.original_name,
        )
        prompt = build_attachment_analysis_prompt(
            original_name=document.original_name,
            mime_type=mime_type,
            formatted_size=document.formatted_size,
        )
        return self._call_classifier(document, prompt, attachment, AnalysisStrategy.ATTACHMENT)

    async def _read_blob(self, document: Document, strategy: AnalysisStrategy) -> Optional[bytes]:
        """Read the document blob; None when it does not exist."""
        try:
            return await self.storage.get(document.storage_path)
        except FileNotFoundError:
            return None
        except StorageError as e:
            raise AnalysisFailedError(
                f"Storage read failed for document {document.id}: {e}",
                document_id=document.id,
                strategy=strategy,
            ) from e

    def _call_classifier(
        self,
        document: Document,
        prompt: str,
        attachment: Optional[ClassifierAttachment],
        strategy: AnalysisStrategy,
    ) -> AnalysisOutcome:
        try:
            response = self.classifier.classify(prompt, attachment=attachment)
        except LLMError as e:
            raise AnalysisFailedError(
                f"Classifier failed for document {document.id}: {e}",
                document_id=document.id,
                strategy=strategy,
            ) from e

        classifier_latency_ms.labels(provider=response.provider, strategy=strategy.value).observe(
            response.latency_ms
        )

        if not isinstance(response.parsed_json, dict):
            raise AnalysisFailedError(
                f"Classifier returned malformed output for document {document.id}",
                document_id=document.id,
                strategy=strategy,
            )

        try:
            result = AnalysisResult.model_validate(response.parsed_json)
        except ValidationError as e:
            raise AnalysisFailedError(
                f"Classifier output failed validation for document {document.id}: {e}",
                document_id=document.id,
                strategy=strategy,
            ) from e

        for warning in response.warnings:
            logger.warning(f"Classifier warning for document {document.id}: {warning}")

        return AnalysisOutcome(
            result=result,
            strategy=strategy,
            classifier_called=True,
            latency_ms=response.latency_ms,
            provider=response.provider,
        )

    @staticmethod
    def _metadata_outcome(document: Document) -> AnalysisOutcome:
        return AnalysisOutcome(
            result=metadata_fallback(document),
            strategy=AnalysisStrategy.METADATA,
            classifier_called=False,
        )
