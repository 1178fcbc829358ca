"""Object storage adapters"""

from .s3_storage_adapter import S3StorageAdapter
from .storage_config import StorageConfig, storage_config_from_settings, validate_storage_config

__all__ = [
    "S3StorageAdapter",
    "StorageConfig",
    "storage_config_from_settings",
    "validate_storage_config",
]
