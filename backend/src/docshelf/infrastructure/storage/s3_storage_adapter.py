"""S3 Storage Adapter - Implementation of BlobStorePort using boto3.

Provides S3-compatible storage operations for AWS S3, MinIO, and other S3-compatible services.
Paths are produced by build_storage_path() and used verbatim as object keys.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from typing import AsyncIterator, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ...domain.documents.ports.object_storage_port import (
    BlobStorePort,
    StorageError,
    StoredBlob,
)

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = ("NoSuchKey", "404", "NotFound")


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class S3StorageAdapter(BlobStorePort):
    """Blob store backed by a single S3 bucket.

    The bucket name doubles as the disk identifier persisted on each document.

    Example:
        config = storage_config_from_settings(settings)
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

        await storage.put("documents/<user>/2026/02/07/<uuid>.md", b"# Notes", "text/markdown")
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
    ):
        """
        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: Bucket holding every document blob
            region: AWS region

        Raises:
            StorageError: If the boto3 client cannot be created
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

        self.bucket_name = bucket_name
        self.region = region
        logger.info(f"Blob store ready: bucket={bucket_name}, endpoint={endpoint_url or 'AWS S3'}")

    @property
    def disk(self) -> str:
        return self.bucket_name

    async def put(self, path: str, data: bytes, mime_type: str = "application/octet-stream") -> StoredBlob:
        """Write data at path with mime_type as the object's Content-Type.

        Raises:
            ValueError: If data is empty
            StorageError: If the write fails
        """
        if not data:
            raise ValueError("Cannot store empty file")

        try:
            self.s3_client.put_object(Bucket=self.bucket_name, Key=path, Body=data, ContentType=mime_type)
        except ClientError as e:
            logger.error(f"Blob write failed: path={path}, code={_error_code(e)}")
            raise StorageError(f"Failed to upload file: {_error_code(e)}")
        except BotoCoreError as e:
            logger.error(f"Blob write failed: path={path}, error={e}")
            raise StorageError(f"Failed to upload file: {e}")

        logger.info(f"Blob written: path={path}, size={len(data)}")
        return StoredBlob(disk=self.bucket_name, path=path, size_bytes=len(data), mime_type=mime_type)

    async def get(self, path: str) -> bytes:
        """Read the whole blob at path.

        Raises:
            FileNotFoundError: No blob at path
            StorageError: Any other read failure
        """
        try:
            body = self.s3_client.get_object(Bucket=self.bucket_name, Key=path)["Body"].read()
        except ClientError as e:
            code = _error_code(e)
            if code in MISSING_OBJECT_CODES:
                raise FileNotFoundError(f"File not found: {path}")
            logger.error(f"Blob read failed: path={path}, code={code}")
            raise StorageError(f"Failed to retrieve file: {code}")
        except BotoCoreError as e:
            logger.error(f"Blob read failed: path={path}, error={e}")
            raise StorageError(f"Failed to retrieve file: {e}")

        logger.debug(f"Blob read: path={path}, size={len(body)}")
        return body

    async def exists(self, path: str) -> bool:
        """HEAD the object. Only a plain miss counts as absent.

        Raises:
            StorageError: The store could not answer (throttling, access denied, 5xx, network)
        """
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            code = _error_code(e)
            if code in MISSING_OBJECT_CODES:
                return False
            logger.error(f"Blob existence check failed: path={path}, code={code}")
            raise StorageError(f"Failed to check file: {code}")
        except BotoCoreError as e:
            logger.error(f"Blob existence check failed: path={path}, error={e}")
            raise StorageError(f"Failed to check file: {e}")
        return True

    async def delete(self, path: str) -> bool:
        """Remove the blob at path.

        Returns:
            bool: False when the blob is confirmed absent

        Raises:
            StorageError: If the existence check or the delete call fails
        """
        if not await self.exists(path):
            logger.info(f"Blob already absent: path={path}")
            return False

        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            logger.error(f"Blob delete failed: path={path}, code={_error_code(e)}")
            raise StorageError(f"Failed to delete file: {_error_code(e)}")
        except BotoCoreError as e:
            logger.error(f"Blob delete failed: path={path}, error={e}")
            raise StorageError(f"Failed to delete file: {e}")

        logger.info(f"Blob deleted: path={path}")
        return True

    async def stream(self, path: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        """Yield the blob at path in chunk_size pieces without buffering it whole.

        Raises:
            FileNotFoundError: No blob at path
            StorageError: Any other read failure
        """
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            code = _error_code(e)
            if code in MISSING_OBJECT_CODES:
                raise FileNotFoundError(f"File not found: {path}")
            raise StorageError(f"Failed to stream file: {code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to stream file: {e}")

        body = response["Body"]
        try:
            for chunk in body.iter_chunks(chunk_size=chunk_size):
                yield chunk
        except BotoCoreError as e:
            logger.error(f"Blob stream interrupted: path={path}, error={e}")
            raise StorageError(f"Failed to stream file: {e}")
        finally:
            body.close()

    async def verify_bucket_exists(self) -> bool:
        """Fail fast at startup when the configured bucket is missing.

        Raises:
            StorageError: Bucket missing or unreachable
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            code = _error_code(e)
            if code in ("404", "NoSuchBucket"):
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update S3_BUCKET_NAME."
                )
            raise StorageError(f"Failed to verify bucket: {code}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to verify bucket: {e}")

        logger.info(f"Verified bucket exists: {self.bucket_name}")
        return True
