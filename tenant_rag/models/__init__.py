"""tenant-rag domain models -- re-exports all public model classes.

    - rag.py    -- chunks, stored records, index descriptions, query/answer results
    - tenant.py -- tenant registry record
"""

from tenant_rag.models.rag import (
    AnswerResult,
    ChunkPreview,
    DocumentChunk,
    IndexDescription,
    IndexSpec,
    IndexState,
    IngestResult,
    NamespaceResult,
    QueryMatch,
    RetrievedDocument,
    StoredRecord,
)
from tenant_rag.models.tenant import TenantRecord

__all__ = [
    "AnswerResult",
    "ChunkPreview",
    "DocumentChunk",
    "IndexDescription",
    "IndexSpec",
    "IndexState",
    "IngestResult",
    "NamespaceResult",
    "QueryMatch",
    "RetrievedDocument",
    "StoredRecord",
    "TenantRecord",
]
