from .object_storage_port import BlobStorePort, StoredBlob, StorageError, build_storage_path

__all__ = ["BlobStorePort", "StoredBlob", "StorageError", "build_storage_path"]
