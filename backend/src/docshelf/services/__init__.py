"""Application services"""

from .document_service import DocumentService, DocumentDownload, file_category, format_bytes
from .public_access import PublicDocumentService
from .qr_code import QrCodeService

__all__ = [
    "DocumentService",
    "DocumentDownload",
    "file_category",
    "format_bytes",
    "PublicDocumentService",
    "QrCodeService",
]
