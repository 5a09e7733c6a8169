"""Sentence-aligned text chunking with a hard character budget.

Splits a document into chunks of at most ``max_size`` characters whose
boundaries always fall between sentences:

1. **Normalize** the text (:func:`~tenant_rag.utils.text_normalizer.normalize_text`).
2. **Segment** on runs of ``.``, ``!`` and ``?``; the delimiters are
   dropped and blank segments discarded.
3. **Pack** segments greedily: a segment joins the current chunk (with a
   ``". "`` separator) when the chunk, including its closing ``"."``, still
   fits in ``max_size``; otherwise the current chunk is closed with ``"."``
   and the segment starts a new one.

A single sentence that cannot fit on its own, closing period included,
becomes its own oversized chunk; it is never cut mid-sentence.  A sentence
of exactly ``max_size`` characters is therefore emitted as a
``max_size + 1`` chunk.

Example::

    >>> SentenceChunker().split("Hello world. This is great!", max_size=15)
    ['Hello world.', 'This is great.']
"""

from __future__ import annotations

import re

import structlog

from tenant_rag.utils.errors import ValidationError
from tenant_rag.utils.text_normalizer import normalize_text

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_CHUNK_SIZE = 1000

_SENTENCE_DELIMITERS = re.compile(r"[.!?]+")


class SentenceChunker:
    """Splits text into bounded-size, sentence-aligned chunks.

    Parameters
    ----------
    max_size:
        Default character budget per chunk, used when :meth:`split` is
        called without one.
    """

    def __init__(self, max_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if max_size <= 0:
            raise ValidationError(message=f"max_size must be positive, got {max_size}", stage="chunk")
        self._max_size = max_size

    @property
    def max_size(self) -> int:
        return self._max_size

    def split(self, text: str, max_size: int | None = None) -> list[str]:
        """Return the ordered chunks of *text*.

        Parameters
        ----------
        text:
            Raw document text; normalized here before splitting.
        max_size:
            Character budget for this call, overriding the instance default.

        Returns
        -------
        list[str]
            Chunks in document order, each terminated with ``"."``.  Empty
            for text with no sentence content.
        """
        limit = self._max_size if max_size is None else max_size
        if limit <= 0:
            raise ValidationError(message=f"max_size must be positive, got {limit}", stage="chunk")

        segments = [s.strip() for s in _SENTENCE_DELIMITERS.split(normalize_text(text))]
        segments = [s for s in segments if s]

        chunks: list[str] = []
        current = ""
        for segment in segments:
            candidate = f"{current}. {segment}" if current else segment
            # +1 reserves room for the closing "."
            if len(candidate) + 1 <= limit:
                current = candidate
                continue
            if current:
                chunks.append(f"{current}.")
            current = segment
        if current:
            chunks.append(f"{current}.")

        logger.debug(
            "text_chunked",
            segments=len(segments),
            chunks=len(chunks),
            max_size=limit,
            oversized=sum(1 for c in chunks if len(c) > limit),
        )
        return chunks
