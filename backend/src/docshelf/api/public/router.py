"""Public link endpoints (no authentication).

GET /p/{token} streams a public document inline; GET /p/{token}/qr returns an
SVG QR code for the canonical link. Unknown tokens and tokens of private
documents both answer 404.
"""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import StreamingResponse

from ...dependencies import get_document_service, get_public_document_service, get_qr_code_service
from ...domain.documents.validation import sanitize_filename
from ...services.document_service import DocumentService
from ...services.public_access import PublicDocumentService
from ...services.qr_code import QrCodeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/p", tags=["public"])

QR_CACHE_CONTROL = "public, max-age=3600"


@router.get("/{token}")
async def show_public_document(
    token: str,
    public_documents: PublicDocumentService = Depends(get_public_document_service),
    service: DocumentService = Depends(get_document_service),
):
    """Stream a public document with its original filename and media type."""
    document = public_documents.resolve(token)
    download = await service.open_stream(document)

    logger.info(f"Public document served: id={document.id}", extra={"document_id": document.id})
    return StreamingResponse(
        download.chunks,
        media_type=download.mime_type,
        headers={
            "Content-Disposition": f'inline; filename="{sanitize_filename(download.filename)}"',
            "Content-Length": str(download.size_bytes),
        },
    )


@router.get("/{token}/qr")
def public_document_qr(
    token: str,
    public_documents: PublicDocumentService = Depends(get_public_document_service),
    qr_codes: QrCodeService = Depends(get_qr_code_service),
):
    """SVG QR code encoding the document's public URL."""
    document = public_documents.resolve(token)
    svg = qr_codes.generate_svg(document)

    return Response(
        content=svg,
        media_type="image/svg+xml",
        headers={"Cache-Control": QR_CACHE_CONTROL},
    )
