"""Format-specific readers that turn uploaded bytes into plain text."""

from tenant_rag.services.ingestion.source_processors.pdf_processor import PDFProcessor
from tenant_rag.services.ingestion.source_processors.text_processor import TextFileProcessor

__all__ = ["PDFProcessor", "TextFileProcessor"]
