"""FastAPI dependencies wiring services to infrastructure.

Adapters are built once per process from Settings. Tests override
get_storage / get_enqueue_analysis through app.dependency_overrides.
"""

import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .domain.documents.ports.object_storage_port import BlobStorePort
from .infrastructure.storage.s3_storage_adapter import S3StorageAdapter
from .infrastructure.storage.storage_config import storage_config_from_settings, validate_storage_config
from .services.document_service import DocumentService, EnqueueAnalysis
from .services.public_access import PublicDocumentService
from .services.qr_code import QrCodeService
from .sharing.service import SharingLedger
from .workers.analysis_worker import enqueue_document_analysis

logger = logging.getLogger(__name__)


@lru_cache()
def get_storage() -> BlobStorePort:
    """S3 storage adapter singleton.

    Raises:
        ValueError: If storage configuration is invalid
    """
    config = storage_config_from_settings(settings)
    validate_storage_config(config)
    adapter = S3StorageAdapter(
        endpoint_url=config.endpoint_url,
        access_key=config.access_key,
        secret_key=config.secret_key,
        bucket_name=config.bucket_name,
        region=config.region,
    )
    logger.info("Initialized storage adapter")
    return adapter


def get_enqueue_analysis() -> EnqueueAnalysis:
    """Callable that schedules the background analysis job."""
    return enqueue_document_analysis


def get_document_service(
    db: Session = Depends(get_db),
    storage: BlobStorePort = Depends(get_storage),
    enqueue_analysis: EnqueueAnalysis = Depends(get_enqueue_analysis),
) -> DocumentService:
    return DocumentService(
        session=db,
        storage=storage,
        enqueue_analysis=enqueue_analysis,
        max_upload_size=settings.MAX_UPLOAD_SIZE_BYTES,
        storage_namespace=settings.STORAGE_NAMESPACE,
        treat_missing_blob_as_deleted=settings.TREAT_MISSING_BLOB_AS_DELETED,
    )


def get_sharing_ledger(db: Session = Depends(get_db)) -> SharingLedger:
    return SharingLedger(db)


def get_public_document_service(db: Session = Depends(get_db)) -> PublicDocumentService:
    return PublicDocumentService(db)


def get_qr_code_service() -> QrCodeService:
    return QrCodeService(base_url=settings.APP_URL)
