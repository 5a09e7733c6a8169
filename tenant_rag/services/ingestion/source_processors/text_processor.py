"""Source processor for uploaded plain-text (.txt) documents."""

from __future__ import annotations

import structlog

from tenant_rag.utils.errors import ProcessingError

logger = structlog.get_logger(logger_name=__name__)


class TextFileProcessor:
    """Decodes an uploaded text file to ``str``."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def extract_text(self, data: bytes) -> str:
        try:
            # utf-8-sig also strips a leading BOM written by some editors
            encoding = "utf-8-sig" if self._encoding.lower() in ("utf-8", "utf8") else self._encoding
            text = data.decode(encoding)
        except UnicodeDecodeError as exc:
            raise ProcessingError(
                message=f"Failed to process TXT file: not valid {self._encoding}",
                stage="extract",
            ) from exc
        if not text.strip():
            raise ProcessingError(message="Failed to process TXT file: file is empty", stage="extract")
        logger.info("txt_text_extracted", chars=len(text))
        return text
