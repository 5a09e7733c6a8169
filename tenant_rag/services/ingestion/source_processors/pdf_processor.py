"""Source processor for uploaded PDF documents.

Reads the raw upload bytes with PyMuPDF (fitz) and returns the document's
text, pages joined by blank lines.  Structure (headings, columns) is not
preserved; the text normalizer and sentence chunker take it from there.
"""

from __future__ import annotations

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from tenant_rag.utils.errors import ProcessingError

logger = structlog.get_logger(logger_name=__name__)


class PDFProcessor:
    """Extracts plain text from a PDF held in memory."""

    def extract_text(self, data: bytes) -> str:
        """Return the concatenated text of every page in *data*.

        Raises
        ------
        ProcessingError
            The bytes are not a readable PDF, or the PDF has no text layer.
        """
        if not data:
            raise ProcessingError(message="Failed to process PDF file: empty upload", stage="extract")

        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                pages = [page.get_text("text") for page in doc]
        except Exception as exc:
            raise ProcessingError(
                message=f"Failed to process PDF file: {exc}",
                provider_name="pymupdf",
                stage="extract",
            ) from exc

        text = "\n\n".join(p.strip() for p in pages if p and p.strip())
        if not text:
            raise ProcessingError(
                message="Failed to process PDF file: no extractable text",
                provider_name="pymupdf",
                stage="extract",
            )

        logger.info("pdf_text_extracted", pages=len(pages), chars=len(text))
        return text
