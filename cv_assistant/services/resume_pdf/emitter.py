"""
Document emitter: owns the PyMuPDF document and serializes it to bytes.
"""

import logging

import fitz  # PyMuPDF

from cv_assistant.services.resume_pdf.canvas import PdfCanvas
from cv_assistant.services.resume_pdf.errors import EmitterError

logger = logging.getLogger(__name__)

LETTER = (612.0, 792.0)
MIN_PDF_BYTES = 1000


class DocumentEmitter:
    def __init__(self, page_size=LETTER, min_bytes: int = MIN_PDF_BYTES):
        self.page_width, self.page_height = page_size
        self.min_bytes = min_bytes
        self._doc = fitz.open()

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def set_title(self, title: str) -> None:
        self._doc.set_metadata({"title": title, "creator": "cv-assistant", "producer": "PyMuPDF"})

    def new_page(self) -> PdfCanvas:
        page = self._doc.new_page(width=self.page_width, height=self.page_height)
        return PdfCanvas(page)

    def discard(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()

    def emit(self) -> bytes:
        """Serialize the document. Refuses to hand back a suspiciously small file."""
        try:
            data = self._doc.tobytes(garbage=3)
        finally:
            self._doc.close()

        if not data:
            raise EmitterError("PDF serialization produced no bytes")
        if len(data) < self.min_bytes:
            logger.error(f"Generated PDF is too small: {len(data)} bytes")
            raise EmitterError(
                f"Generated PDF is too small ({len(data)} bytes), please check your content"
            )
        logger.info(f"PDF emitted: {len(data)} bytes")
        return data
