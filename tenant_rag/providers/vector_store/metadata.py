"""Metadata flattening shared by the vector store adapters.

Both ChromaDB and Pinecone accept only flat metadata whose values are
``str``, ``int``, ``float`` or ``bool`` (Pinecone also takes lists of
strings, ChromaDB does not).  Caller-supplied document metadata can be
anything JSON-ish, so it is flattened before it reaches either store.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

MetadataValue = str | int | float | bool


def flatten_metadata(metadata: dict[str, Any]) -> dict[str, MetadataValue]:
    """Return a store-safe copy of *metadata*.

    ``None`` values are dropped, dates become ISO strings, everything else
    that is not a scalar is JSON-encoded.
    """
    flat: dict[str, MetadataValue] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, (str, bool, int, float)):
            flat[str(key)] = value
        elif isinstance(value, (datetime, date)):
            flat[str(key)] = value.isoformat()
        else:
            flat[str(key)] = json.dumps(value, default=str, sort_keys=True)
    return flat
