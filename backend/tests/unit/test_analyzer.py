"""Unit tests for DocumentAnalyzer strategy selection

Covers the TEXT / ATTACHMENT / METADATA strategies, truncation, attachment
kinds and the error mapping to AnalysisFailedError.
"""

import uuid

import pytest

from docshelf.analysis.analyzer import (
    TRUNCATION_MARKER,
    AnalysisFailedError,
    AnalysisStrategy,
    DocumentAnalyzer,
    is_text_document,
    metadata_fallback,
    truncate_text,
)
from docshelf.domain.ai.ports import AttachmentKind, LLMTimeoutError
from docshelf.domain.documents.ports.object_storage_port import StorageError
from docshelf.domain.documents.sensitivity import Sensitivity
from docshelf.domain.documents.visibility import Visibility
from docshelf.models.document import Document


def document_for(blob_store, name, mime_type, content=None, **fields):
    """Build an in-memory Document, storing content in blob_store when given."""
    path = f"documents/{uuid.uuid4()}/2026/03/01/{uuid.uuid4()}"
    if content is not None:
        blob_store.blobs[path] = (content, mime_type)
    return Document(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        original_name=name,
        mime_type=mime_type,
        size_bytes=len(content or b""),
        storage_disk=blob_store.disk,
        storage_path=path,
        visibility=Visibility.PRIVATE,
        ai_analyzed=False,
        **fields,
    )


class TestTextDetection:
    """Test is_text_document()"""

    @pytest.mark.parametrize(
        "mime_type,name",
        [
            ("text/plain", "a.bin"),
            ("application/json", "data"),
            ("application/octet-stream", "setup.PY"),
            ("application/octet-stream", "config.yml"),
            ("TEXT/MARKDOWN", "notes"),
        ],
    )
    def test_text_family(self, mime_type, name):
        assert is_text_document(mime_type, name) is True

    @pytest.mark.parametrize(
        "mime_type,name",
        [("application/pdf", "report.pdf"), ("image/png", "photo.png"), (None, None)],
    )
    def test_not_text(self, mime_type, name):
        assert is_text_document(mime_type, name) is False


class TestTruncation:
    """Test truncate_text()"""

    def test_short_content_unchanged(self):
        assert truncate_text("hello", budget=10) == "hello"

    def test_exact_budget_unchanged(self):
        assert truncate_text("x" * 10, budget=10) == "x" * 10

    def test_long_content_truncated_with_marker(self):
        assert truncate_text("abcdef", budget=3) == "abc" + TRUNCATION_MARKER


class TestMetadataFallback:
    """Test the deterministic metadata result"""

    def test_title_from_filename(self, blob_store):
        document = document_for(blob_store, "quarterly_sales-report.xlsx", "application/vnd.ms-excel")

        result = metadata_fallback(document)

        assert result.title == "Quarterly Sales Report"
        assert result.description == "A xlsx document."
        assert result.tags == ["xlsx"]
        assert result.summary == "This is a application/vnd.ms-excel file named quarterly_sales-report.xlsx."
        assert result.sensitivity == Sensitivity.SAFE

    def test_existing_title_and_description_kept(self, blob_store):
        document = document_for(
            blob_store, "scan.pdf", "application/pdf", title="My Scan", description="Scanned letter"
        )

        result = metadata_fallback(document)

        assert result.title == "My Scan"
        assert result.description == "Scanned letter"

    def test_no_extension(self, blob_store):
        document = document_for(blob_store, "LICENSE", "application/octet-stream")

        result = metadata_fallback(document)

        assert result.title == "LICENSE"
        assert result.description == "A document."
        assert result.tags == []


class TestDocumentAnalyzer:
    """Test DocumentAnalyzer.classify()"""

    @pytest.mark.asyncio
    async def test_text_strategy_inlines_content(self, analyzer, classifier, blob_store):
        document = document_for(blob_store, "notes.md", "text/markdown", b"# Roadmap\nShip it.")

        outcome = await analyzer.classify(document)

        assert outcome.strategy == AnalysisStrategy.TEXT
        assert outcome.classifier_called is True
        assert outcome.result.title == "AI Title"
        prompt, attachment = classifier.calls[0]
        assert attachment is None
        assert "# Roadmap\nShip it." in prompt
        assert "notes.md" in prompt

    @pytest.mark.asyncio
    async def test_text_strategy_truncates_to_budget(self, classifier, blob_store):
        analyzer = DocumentAnalyzer(classifier=classifier, storage=blob_store, text_char_budget=100)
        document = document_for(blob_store, "big.txt", "text/plain", b"a" * 150 + b"TAIL")

        await analyzer.classify(document)

        prompt, _ = classifier.calls[0]
        assert "a" * 100 + TRUNCATION_MARKER in prompt
        assert "TAIL" not in prompt

    @pytest.mark.asyncio
    async def test_empty_text_uses_metadata(self, analyzer, classifier, blob_store):
        document = document_for(blob_store, "empty.txt", "text/plain", b"   \n")

        outcome = await analyzer.classify(document)

        assert outcome.strategy == AnalysisStrategy.METADATA
        assert classifier.calls == []

    @pytest.mark.asyncio
    async def test_image_sent_as_image_attachment(self, analyzer, classifier, blob_store):
        document = document_for(blob_store, "photo.png", "image/png", b"\x89PNG fake")

        outcome = await analyzer.classify(document)

        assert outcome.strategy == AnalysisStrategy.ATTACHMENT
        _, attachment = classifier.calls[0]
        assert attachment.kind == AttachmentKind.IMAGE
        assert attachment.data == b"\x89PNG fake"
        assert attachment.mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_pdf_sent_as_document_attachment(self, analyzer, classifier, blob_store):
        document = document_for(blob_store, "report.pdf", "application/pdf", b"%PDF-1.4")

        await analyzer.classify(document)

        prompt, attachment = classifier.calls[0]
        assert attachment.kind == AttachmentKind.DOCUMENT
        assert attachment.filename == "report.pdf"
        assert "report.pdf" in prompt

    @pytest.mark.asyncio
    async def test_missing_blob_uses_metadata_without_classifier(self, analyzer, classifier, blob_store):
        """Test a missing blob never calls the classifier and never fails"""
        document = document_for(blob_store, "quarterly_sales-report.xlsx", "application/vnd.ms-excel")

        outcome = await analyzer.classify(document)

        assert outcome.strategy == AnalysisStrategy.METADATA
        assert outcome.classifier_called is False
        assert outcome.result.title == "Quarterly Sales Report"
        assert classifier.calls == []

    @pytest.mark.asyncio
    async def test_missing_text_blob_uses_metadata(self, analyzer, classifier, blob_store):
        document = document_for(blob_store, "gone.md", "text/markdown")

        outcome = await analyzer.classify(document)

        assert outcome.strategy == AnalysisStrategy.METADATA
        assert classifier.calls == []

    @pytest.mark.asyncio
    async def test_classifier_error_raises_analysis_failed(self, analyzer, classifier, blob_store):
        classifier.respond_with(LLMTimeoutError("timed out"))
        document = document_for(blob_store, "notes.txt", "text/plain", b"hello")

        with pytest.raises(AnalysisFailedError) as exc_info:
            await analyzer.classify(document)

        assert exc_info.value.strategy == AnalysisStrategy.TEXT
        assert exc_info.value.document_id == document.id

    @pytest.mark.asyncio
    async def test_malformed_response_raises_analysis_failed(self, analyzer, classifier, blob_store):
        classifier.respond_with(None)
        document = document_for(blob_store, "photo.jpg", "image/jpeg", b"jpeg")

        with pytest.raises(AnalysisFailedError) as exc_info:
            await analyzer.classify(document)

        assert exc_info.value.strategy == AnalysisStrategy.ATTACHMENT

    @pytest.mark.asyncio
    async def test_storage_error_raises_analysis_failed(self, analyzer, blob_store):
        document = document_for(blob_store, "notes.txt", "text/plain", b"hello")
        blob_store.fail_reads = True

        with pytest.raises(AnalysisFailedError):
            await analyzer.classify(document)

    @pytest.mark.asyncio
    async def test_existence_check_failure_raises_analysis_failed(self, analyzer, classifier, blob_store, monkeypatch):
        async def unavailable(path):
            raise StorageError("503")

        monkeypatch.setattr(blob_store, "exists", unavailable)
        document = document_for(blob_store, "photo.jpg", "image/jpeg", b"jpeg")

        with pytest.raises(AnalysisFailedError) as exc_info:
            await analyzer.classify(document)

        assert exc_info.value.strategy == AnalysisStrategy.ATTACHMENT
        assert classifier.calls == []

    @pytest.mark.asyncio
    async def test_unexpected_error_raises_analysis_failed(self, analyzer, blob_store, monkeypatch):
        async def connection_reset(path):
            raise ConnectionResetError("peer reset")

        monkeypatch.setattr(blob_store, "get", connection_reset)
        document = document_for(blob_store, "notes.txt", "text/plain", b"hello")

        with pytest.raises(AnalysisFailedError) as exc_info:
            await analyzer.classify(document)

        assert isinstance(exc_info.value.__cause__, ConnectionResetError)

    @pytest.mark.asyncio
    async def test_result_is_normalized(self, analyzer, classifier, blob_store):
        classifier.respond_with({"title": " T ", "tags": "a,b,c,d,e,f", "sensitivity": "SENSITIVE"})
        document = document_for(blob_store, "notes.txt", "text/plain", b"hello")

        outcome = await analyzer.classify(document)

        assert outcome.result.title == "T"
        assert outcome.result.tags == ["a", "b", "c", "d", "e"]
        assert outcome.result.sensitivity == Sensitivity.SENSITIVE
