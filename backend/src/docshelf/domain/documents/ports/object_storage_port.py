"""Blob Store Port - Domain interface for key-addressed document storage.

This port defines the contract for storing and retrieving document bytes in object
storage. Adapters must implement this interface to provide S3, MinIO, or other
storage backends.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import AsyncIterator, Optional
from uuid import UUID, uuid4


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


@dataclass
class StoredBlob:
    """Metadata for a blob written to object storage.

    Attributes:
        disk: Bucket/disk identifier the blob lives in (document.storage_disk)
        path: Key within the disk (document.storage_path)
        size_bytes: Blob size in bytes
        mime_type: Declared MIME type
    """
    disk: str
    path: str
    size_bytes: int
    mime_type: str


def build_storage_path(
    owner_id: UUID,
    original_name: str,
    namespace: str = "documents",
    now: Optional[datetime] = None,
) -> str:
    """Generate a collision-free storage path partitioned by owner and date.

    Format: {namespace}/{owner_id}/{yyyy}/{mm}/{dd}/{uuid}.{ext}

    The extension comes from the original filename (lowercased); files without an
    extension are stored as .bin.

    Example:
        >>> build_storage_path(
        ...     UUID('a1b2c3d4-e5f6-7890-abcd-ef1234567890'),
        ...     'Notes.MD',
        ...     now=datetime(2026, 2, 7),
        ... )  # doctest: +ELLIPSIS
        'documents/a1b2c3d4-e5f6-7890-abcd-ef1234567890/2026/02/07/....md'
    """
    now = now or datetime.now(timezone.utc)
    extension = PurePosixPath(original_name).suffix.lstrip(".").lower() or "bin"
    return f"{namespace}/{owner_id}/{now:%Y/%m/%d}/{uuid4()}.{extension}"


class BlobStorePort(ABC):
    """Port interface for document blob storage.

    Paths are opaque keys produced by build_storage_path(); the store never
    interprets them. All methods are coroutines because every backend call is a
    network round trip.

    Example Usage:
        storage = S3StorageAdapter(...)

        path = build_storage_path(user.id, "notes.md")
        await storage.put(path, b"# Notes", mime_type="text/markdown")
        content = await storage.get(path)
    """

    @property
    @abstractmethod
    def disk(self) -> str:
        """Identifier persisted in document.storage_disk."""
        pass

    @abstractmethod
    async def put(self, path: str, data: bytes, mime_type: str = "application/octet-stream") -> StoredBlob:
        """Write bytes at path, replacing any existing blob.

        Raises:
            StorageError: If the write fails
            ValueError: If data is empty
        """
        pass

    @abstractmethod
    async def get(self, path: str) -> bytes:
        """Read the full blob at path.

        Raises:
            FileNotFoundError: If no blob exists at path
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether a blob exists at path (HEAD request, never raises)."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """Delete the blob at path.

        Returns:
            bool: True if a blob was deleted, False if none existed

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    def stream(self, path: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        """Stream the blob at path in chunks.

        Callers should check exists() first; a missing blob raises
        FileNotFoundError on first iteration.
        """
        pass
