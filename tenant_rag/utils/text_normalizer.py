"""Deterministic text cleanup applied before chunking.

Documents arrive from PDF extraction and scraped article dumps, where words
are often glued together at line breaks ("endOf the line") and punctuation
spacing is inconsistent.  :func:`normalize_text` repairs both so the
sentence splitter in :mod:`tenant_rag.services.ingestion.chunker` sees one
canonical form.

The function is total (any string, including ``""``) and idempotent:
``normalize_text(normalize_text(x)) == normalize_text(x)``.
"""

from __future__ import annotations

import re

# lowercase immediately followed by uppercase -> two words
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_WHITESPACE_RUN = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([.,!?])")
_PUNCT_WITHOUT_SPACE = re.compile(r"([.,!?])(?=\S)")


def normalize_text(text: str) -> str:
    """Return *text* with word boundaries, whitespace and punctuation spacing fixed.

    Steps run in this order:

    1. split camel-joined words (``"aB"`` -> ``"a B"``),
    2. collapse every whitespace run (newlines included) to one space,
    3. drop whitespace before ``. , ! ?``,
    4. add one space after ``. , ! ?`` when something other than
       whitespace follows,
    5. strip leading and trailing whitespace.

    >>> normalize_text(" a  b,c .d")
    'a b, c. d'
    """
    if not text:
        return ""
    text = _CAMEL_BOUNDARY.sub(r"\1 \2", text)
    text = _WHITESPACE_RUN.sub(" ", text)
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    text = _PUNCT_WITHOUT_SPACE.sub(r"\1 ", text)
    return text.strip()
