"""Document ingestion pipeline: **extract -> chunk -> embed -> upsert**.

1. **Extract** (source_processors/) -- PDF and TXT uploads to plain text.
2. **Chunk** (chunker.py / SentenceChunker) -- normalized, sentence-aligned
   chunks of at most CHUNK_SIZE characters.
3. **Embed** (via IEmbeddingProvider) -- one vector per chunk.
4. **Upsert** (via IVectorStoreProvider) -- into the tenant's namespace.

IngestionService orchestrates all four and exposes ingest, ingest_pdf,
ingest_text_file and ingest_many.
"""

from tenant_rag.services.ingestion.chunker import SentenceChunker
from tenant_rag.services.ingestion.ingestion_service import IngestionService

__all__ = ["IngestionService", "SentenceChunker"]
