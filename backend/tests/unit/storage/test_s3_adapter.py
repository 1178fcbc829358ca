"""Unit tests for S3 Storage Adapter using moto

This module tests the S3StorageAdapter implementation using moto to mock AWS S3.
Tests cover put, get, exists, delete, chunked streaming, bucket verification
and the storage path layout.
"""

from datetime import datetime, timezone
from uuid import UUID

import boto3
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from moto import mock_aws

from docshelf.domain.documents.ports.object_storage_port import (
    StorageError,
    StoredBlob,
    build_storage_path,
)
from docshelf.domain.documents.visibility import Visibility
from docshelf.errors import StorageInconsistencyError
from docshelf.infrastructure.storage.s3_storage_adapter import S3StorageAdapter
from docshelf.models.document import Document
from docshelf.services.document_service import DocumentService


# Test constants
TEST_BUCKET = "test-docshelf-bucket"
TEST_REGION = "us-east-1"
TEST_ACCESS_KEY = "test-access-key"
TEST_SECRET_KEY = "test-secret-key"
TEST_OWNER_ID = UUID("a1b2c3d4-e5f6-7890-abcd-ef1234567890")


def make_adapter(bucket_name=TEST_BUCKET):
    return S3StorageAdapter(
        endpoint_url=None,
        access_key=TEST_ACCESS_KEY,
        secret_key=TEST_SECRET_KEY,
        bucket_name=bucket_name,
        region=TEST_REGION,
    )


@pytest.fixture
def storage_adapter():
    """Create S3StorageAdapter instance with mock S3"""
    with mock_aws():
        s3_client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id=TEST_ACCESS_KEY,
            aws_secret_access_key=TEST_SECRET_KEY,
        )
        s3_client.create_bucket(Bucket=TEST_BUCKET)

        yield make_adapter()


class TestS3AdapterInitialization:
    """Test S3 adapter initialization"""

    def test_adapter_creation_success(self):
        with mock_aws():
            adapter = make_adapter()

            assert adapter.bucket_name == TEST_BUCKET
            assert adapter.region == TEST_REGION

    def test_disk_is_bucket_name(self):
        with mock_aws():
            assert make_adapter().disk == TEST_BUCKET


class TestPut:
    """Test object upload"""

    @pytest.mark.asyncio
    async def test_put_success(self, storage_adapter):
        path = build_storage_path(TEST_OWNER_ID, "notes.md")

        stored = await storage_adapter.put(path, b"# Notes", "text/markdown")

        assert isinstance(stored, StoredBlob)
        assert stored.disk == TEST_BUCKET
        assert stored.path == path
        assert stored.size_bytes == 7
        assert stored.mime_type == "text/markdown"

    @pytest.mark.asyncio
    async def test_put_sets_content_type(self, storage_adapter):
        await storage_adapter.put("documents/x/report.pdf", b"%PDF-1.4", "application/pdf")

        head = storage_adapter.s3_client.head_object(Bucket=TEST_BUCKET, Key="documents/x/report.pdf")
        assert head["ContentType"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_put_empty_raises_error(self, storage_adapter):
        with pytest.raises(ValueError, match="Cannot store empty file"):
            await storage_adapter.put("documents/x/empty.txt", b"", "text/plain")


class TestGet:
    """Test object download"""

    @pytest.mark.asyncio
    async def test_get_returns_bytes(self, storage_adapter):
        await storage_adapter.put("documents/x/a.txt", b"hello", "text/plain")

        assert await storage_adapter.get("documents/x/a.txt") == b"hello"

    @pytest.mark.asyncio
    async def test_get_missing_raises_file_not_found(self, storage_adapter):
        with pytest.raises(FileNotFoundError):
            await storage_adapter.get("documents/x/missing.txt")


class TestExistsAndDelete:
    """Test existence checks and deletion"""

    @pytest.mark.asyncio
    async def test_exists(self, storage_adapter):
        await storage_adapter.put("documents/x/a.txt", b"hello", "text/plain")

        assert await storage_adapter.exists("documents/x/a.txt") is True
        assert await storage_adapter.exists("documents/x/b.txt") is False

    @pytest.mark.asyncio
    async def test_delete_existing(self, storage_adapter):
        await storage_adapter.put("documents/x/a.txt", b"hello", "text/plain")

        assert await storage_adapter.delete("documents/x/a.txt") is True
        assert await storage_adapter.exists("documents/x/a.txt") is False

    @pytest.mark.asyncio
    async def test_delete_missing_returns_false(self, storage_adapter):
        assert await storage_adapter.delete("documents/x/missing.txt") is False


class TestStream:
    """Test chunked streaming"""

    @pytest.mark.asyncio
    async def test_stream_in_chunks(self, storage_adapter):
        content = b"X" * (20 * 1024)
        await storage_adapter.put("documents/x/big.bin", content, "application/octet-stream")

        chunks = [chunk async for chunk in storage_adapter.stream("documents/x/big.bin", chunk_size=8 * 1024)]

        assert b"".join(chunks) == content
        assert len(chunks) == 3

    @pytest.mark.asyncio
    async def test_stream_missing_raises_file_not_found(self, storage_adapter):
        with pytest.raises(FileNotFoundError):
            async for _ in storage_adapter.stream("documents/x/missing.bin"):
                pass


class TestVerifyBucket:
    """Test startup bucket verification"""

    @pytest.mark.asyncio
    async def test_existing_bucket(self, storage_adapter):
        assert await storage_adapter.verify_bucket_exists() is True

    @pytest.mark.asyncio
    async def test_missing_bucket_raises(self):
        with mock_aws():
            adapter = make_adapter(bucket_name="no-such-bucket")

            with pytest.raises(StorageError, match="does not exist"):
                await adapter.verify_bucket_exists()


class TestBuildStoragePath:
    """Test storage path layout"""

    def test_layout(self):
        now = datetime(2026, 2, 7, tzinfo=timezone.utc)

        path = build_storage_path(TEST_OWNER_ID, "Report.PDF", now=now)

        assert path.startswith(f"documents/{TEST_OWNER_ID}/2026/02/07/")
        assert path.endswith(".pdf")

    def test_missing_extension(self):
        assert build_storage_path(TEST_OWNER_ID, "README").endswith(".bin")

    def test_paths_are_unique(self):
        assert build_storage_path(TEST_OWNER_ID, "a.txt") != build_storage_path(TEST_OWNER_ID, "a.txt")


def raise_client_error(code, operation="HeadObject"):
    def _raise(**kwargs):
        raise ClientError({"Error": {"Code": code, "Message": "simulated"}}, operation)
    return _raise


def raise_connection_error(**kwargs):
    raise EndpointConnectionError(endpoint_url="http://s3.unreachable.test")


class TestStoreFailures:
    """Test that store failures never read as a missing blob"""

    @pytest.mark.asyncio
    async def test_exists_raises_on_service_unavailable(self, storage_adapter, monkeypatch):
        await storage_adapter.put("documents/x/a.txt", b"hello", "text/plain")
        monkeypatch.setattr(storage_adapter.s3_client, "head_object", raise_client_error("503"))

        with pytest.raises(StorageError):
            await storage_adapter.exists("documents/x/a.txt")

    @pytest.mark.asyncio
    async def test_exists_raises_on_access_denied(self, storage_adapter, monkeypatch):
        monkeypatch.setattr(storage_adapter.s3_client, "head_object", raise_client_error("AccessDenied"))

        with pytest.raises(StorageError):
            await storage_adapter.exists("documents/x/a.txt")

    @pytest.mark.asyncio
    async def test_delete_keeps_blob_when_check_fails(self, storage_adapter, monkeypatch):
        await storage_adapter.put("documents/x/a.txt", b"hello", "text/plain")
        real_head = storage_adapter.s3_client.head_object
        monkeypatch.setattr(storage_adapter.s3_client, "head_object", raise_client_error("503"))

        with pytest.raises(StorageError):
            await storage_adapter.delete("documents/x/a.txt")

        assert real_head(Bucket=TEST_BUCKET, Key="documents/x/a.txt")["ContentLength"] == 5

    @pytest.mark.asyncio
    async def test_get_connection_error_raises_storage_error(self, storage_adapter, monkeypatch):
        monkeypatch.setattr(storage_adapter.s3_client, "get_object", raise_connection_error)

        with pytest.raises(StorageError):
            await storage_adapter.get("documents/x/a.txt")

    @pytest.mark.asyncio
    async def test_exists_connection_error_raises_storage_error(self, storage_adapter, monkeypatch):
        monkeypatch.setattr(storage_adapter.s3_client, "head_object", raise_connection_error)

        with pytest.raises(StorageError):
            await storage_adapter.exists("documents/x/a.txt")

    @pytest.mark.asyncio
    async def test_stream_connection_error_raises_storage_error(self, storage_adapter, monkeypatch):
        monkeypatch.setattr(storage_adapter.s3_client, "get_object", raise_connection_error)

        with pytest.raises(StorageError):
            async for _ in storage_adapter.stream("documents/x/a.txt"):
                pass


class TestDocumentDeleteWithS3:
    """Test the delete flow against the S3 adapter when the store misbehaves"""

    @pytest.mark.asyncio
    async def test_record_kept_when_store_unavailable(self, storage_adapter, monkeypatch, db_session, alice):
        path = build_storage_path(alice.id, "notes.md")
        await storage_adapter.put(path, b"# Notes", "text/markdown")
        document = Document(
            user_id=alice.id,
            original_name="notes.md",
            mime_type="text/markdown",
            size_bytes=7,
            storage_disk=storage_adapter.disk,
            storage_path=path,
            visibility=Visibility.PRIVATE,
            ai_analyzed=False,
        )
        db_session.add(document)
        db_session.commit()
        service = DocumentService(
            session=db_session,
            storage=storage_adapter,
            enqueue_analysis=lambda document_id, force_update=False: None,
            treat_missing_blob_as_deleted=True,
        )
        monkeypatch.setattr(storage_adapter.s3_client, "head_object", raise_client_error("503"))

        with pytest.raises(StorageInconsistencyError):
            await service.delete(alice, document)

        assert db_session.get(Document, document.id) is not None
        assert await storage_adapter.get(path) == b"# Notes"
