"""Blob store configuration derived from application Settings.

The same adapter serves MinIO in development (explicit endpoint) and AWS S3 in
production (no endpoint, regional defaults).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class StorageConfig:
    """Connection details for the document bucket.

    Attributes:
        endpoint_url: MinIO/S3-compatible endpoint, None for AWS S3
        bucket_name: Bucket holding every blob (also document.storage_disk)
        namespace: First segment of every storage path
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    namespace: str = "documents"


def storage_config_from_settings(settings) -> StorageConfig:
    """Build an (unvalidated) StorageConfig from docshelf.config.Settings."""
    return StorageConfig(
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
        namespace=settings.STORAGE_NAMESPACE,
    )


def validate_storage_config(config: StorageConfig) -> None:
    """Reject configurations the adapter cannot work with.

    Raises:
        ValueError: Listing every problem found
    """
    problems = [
        f"{name} is required"
        for name in ("access_key", "secret_key", "bucket_name")
        if not getattr(config, name)
    ]

    if not config.namespace or "/" in config.namespace:
        problems.append(f"namespace must be a single path segment, got {config.namespace!r}")

    if config.endpoint_url and not config.endpoint_url.startswith(("http://", "https://")):
        problems.append(f"endpoint_url must start with http:// or https://, got {config.endpoint_url}")
    if not config.endpoint_url and not config.region:
        problems.append("region is required when using AWS S3 (S3_ENDPOINT_URL not set)")

    if problems:
        raise ValueError("Invalid storage configuration: " + "; ".join(problems))
