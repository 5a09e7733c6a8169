"""Unit tests for the PDF and TXT source processors."""

from __future__ import annotations

import fitz
import pytest

from tenant_rag.services.ingestion.source_processors.pdf_processor import PDFProcessor
from tenant_rag.services.ingestion.source_processors.text_processor import TextFileProcessor
from tenant_rag.utils.errors import ProcessingError


def _pdf_bytes(*pages: str) -> bytes:
    """Build an in-memory PDF with one page per string (empty string = blank page)."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


class TestPDFProcessor:
    def test_extracts_text_from_every_page(self) -> None:
        text = PDFProcessor().extract_text(_pdf_bytes("Quarterly revenue grew.", "Costs fell sharply."))
        assert "Quarterly revenue grew." in text
        assert "Costs fell sharply." in text
        assert text.index("Quarterly") < text.index("Costs")

    def test_blank_pages_are_skipped(self) -> None:
        text = PDFProcessor().extract_text(_pdf_bytes("", "Only page with text."))
        assert text == "Only page with text."

    def test_empty_upload(self) -> None:
        with pytest.raises(ProcessingError):
            PDFProcessor().extract_text(b"")

    def test_not_a_pdf(self) -> None:
        with pytest.raises(ProcessingError) as exc_info:
            PDFProcessor().extract_text(b"this is plainly not a pdf document")
        assert exc_info.value.stage == "extract"

    def test_pdf_without_text_layer(self) -> None:
        with pytest.raises(ProcessingError):
            PDFProcessor().extract_text(_pdf_bytes(""))


class TestTextFileProcessor:
    def test_decodes_utf8(self) -> None:
        assert TextFileProcessor().extract_text("Café menu.".encode("utf-8")) == "Café menu."

    def test_strips_byte_order_mark(self) -> None:
        assert TextFileProcessor().extract_text(b"\xef\xbb\xbfHello.") == "Hello."

    def test_invalid_bytes(self) -> None:
        with pytest.raises(ProcessingError):
            TextFileProcessor().extract_text(b"\xff\xfe\xfa invalid")

    def test_empty_file(self) -> None:
        with pytest.raises(ProcessingError):
            TextFileProcessor().extract_text(b"   \n ")

    def test_custom_encoding(self) -> None:
        assert TextFileProcessor(encoding="latin-1").extract_text("Größe".encode("latin-1")) == "Größe"
