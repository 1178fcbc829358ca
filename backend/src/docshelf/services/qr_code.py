"""QR code rendering for public document links (segno)."""

import io
import logging
from typing import Optional

import segno

from ..models.document import Document

logger = logging.getLogger(__name__)

QR_ERROR_LEVEL = "m"
QR_BORDER = 2
QR_DARK = "#000000"
QR_LIGHT = "#ffffff"


class QrCodeService:
    """Render QR codes that encode a document's canonical public URL.

    Args:
        base_url: Application base URL (APP_URL) used to build /p/{token} links
    """

    def __init__(self, base_url: str):
        self.base_url = base_url

    def generate_svg(self, document: Document, size: int = 200) -> Optional[str]:
        """SVG markup for the document's public URL, or None unless it is public."""
        url = document.public_url(self.base_url)
        if url is None:
            return None
        return self.generate_for_url(url, size)

    def generate_data_uri(self, document: Document, size: int = 200) -> Optional[str]:
        """data:image/svg+xml URI for embedding, or None unless the document is public."""
        url = document.public_url(self.base_url)
        if url is None:
            return None

        qr = segno.make(url, error=QR_ERROR_LEVEL)
        return qr.svg_data_uri(
            scale=self._scale_for(qr, size), border=QR_BORDER, dark=QR_DARK, light=QR_LIGHT
        )

    def generate_for_url(self, url: str, size: int = 200) -> str:
        """Standalone SVG document encoding any URL."""
        qr = segno.make(url, error=QR_ERROR_LEVEL)
        buff = io.BytesIO()
        qr.save(
            buff,
            kind="svg",
            scale=self._scale_for(qr, size),
            border=QR_BORDER,
            dark=QR_DARK,
            light=QR_LIGHT,
            xmldecl=False,
        )
        return buff.getvalue().decode("utf-8")

    @staticmethod
    def _scale_for(qr, size: int) -> int:
        """Largest integer module scale that keeps the symbol within size pixels."""
        width, _ = qr.symbol_size(scale=1, border=QR_BORDER)
        return max(1, size // width)
