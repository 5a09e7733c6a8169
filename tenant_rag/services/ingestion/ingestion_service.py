"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **extract -> chunk -> embed -> upsert**.

:class:`IngestionService` coordinates its collaborators without any of
them knowing about each other:

    1. Source processor -- PDF / TXT bytes to plain text (uploads only)
    2. SentenceChunker  -- bounded, sentence-aligned chunks
    3. IEmbeddingProvider -- one vector per chunk
    4. IVectorStoreProvider -- upsert into the tenant's namespace

All dependencies are injected through the constructor, so tests swap in
fakes and deployments swap Ollama for OpenAI or ChromaDB for Pinecone
without touching this class.

Chunks are embedded one at a time by default.  With
``embedding_concurrency > 1`` the chunks of a document are embedded and
upserted concurrently under a semaphore; ordinals and record ids are fixed
before dispatch, so completion order never affects the stored metadata.

A failure aborts the document (and, in :meth:`ingest_many`, the batch).
Chunks upserted before the failure stay in the store.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

from tenant_rag.models.rag import ChunkPreview, DocumentChunk, IngestResult, StoredRecord
from tenant_rag.services.ingestion.chunker import SentenceChunker
from tenant_rag.services.ingestion.source_processors.pdf_processor import PDFProcessor
from tenant_rag.services.ingestion.source_processors.text_processor import TextFileProcessor
from tenant_rag.services.validation import require_tenant_id
from tenant_rag.utils.concurrency import throttled_gather
from tenant_rag.utils.errors import RagPipelineError, ValidationError

if TYPE_CHECKING:
    from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
    from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Orchestrates chunk -> embed -> upsert for one tenant at a time.

    Parameters
    ----------
    chunker:
        Splits normalized text into sentence-aligned chunks.
    embedding_provider:
        Generates one embedding vector per chunk.
    vector_store:
        Stores records in the tenant's namespace.
    embedding_concurrency:
        Maximum chunks of one document in flight at once (``1`` = sequential).
    pdf_processor, text_processor:
        Upload readers; defaults are constructed when omitted.
    """

    def __init__(
        self,
        chunker: SentenceChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        embedding_concurrency: int = 1,
        pdf_processor: PDFProcessor | None = None,
        text_processor: TextFileProcessor | None = None,
    ) -> None:
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._embedding_concurrency = max(1, embedding_concurrency)
        self._pdf_processor = pdf_processor or PDFProcessor()
        self._text_processor = text_processor or TextFileProcessor()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(
        self,
        tenant_id: str,
        text: str,
        metadata: dict[str, Any] | None = None,
    ) -> IngestResult:
        """Chunk, embed and store *text* in *tenant_id*'s namespace.

        Each stored record's metadata is the caller's *metadata* plus
        ``text``, ``chunk_index``, ``total_chunks``, ``timestamp``,
        ``tenant_id`` and ``document_id`` (pipeline fields win on clashes).

        Raises
        ------
        ValidationError
            Missing tenant id or non-string text.
        TransportError, InvalidResponseFormat, DimensionMismatch
            From the embedding provider or vector store, tagged with the
            tenant id and the failing stage.
        """
        tenant_id = require_tenant_id(tenant_id)
        if not isinstance(text, str):
            raise ValidationError(message="Document text must be a string", tenant_id=tenant_id, stage="validate")

        start = time.monotonic()
        chunks = self._build_chunks(tenant_id, text)
        document_id = chunks[0].document_id if chunks else str(uuid.uuid4())

        logger.info(
            "document_ingest_started",
            tenant_id=tenant_id,
            document_id=document_id,
            chunk_count=len(chunks),
        )

        extra = dict(metadata or {})
        if self._embedding_concurrency == 1:
            for chunk in chunks:
                await self._embed_and_store(chunk, extra)
        else:
            await self._embed_and_store_concurrently(chunks, extra)

        elapsed = time.monotonic() - start
        logger.info(
            "document_ingested",
            tenant_id=tenant_id,
            document_id=document_id,
            chunk_count=len(chunks),
            elapsed_seconds=round(elapsed, 3),
        )
        return IngestResult(
            tenant_id=tenant_id,
            document_id=document_id,
            chunk_count=len(chunks),
            chunk_ids=[c.record_id for c in chunks],
            chunks=[ChunkPreview(id=c.record_id, text=c.text) for c in chunks],
            elapsed_seconds=elapsed,
        )

    async def ingest_pdf(
        self,
        tenant_id: str,
        data: bytes,
        metadata: dict[str, Any] | None = None,
    ) -> IngestResult:
        """Extract text from PDF bytes, then :meth:`ingest` it tagged ``document_type="pdf"``."""
        tenant_id = require_tenant_id(tenant_id)
        try:
            text = self._pdf_processor.extract_text(data)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=tenant_id, stage="extract")
        return await self.ingest(tenant_id, text, {**(metadata or {}), "document_type": "pdf"})

    async def ingest_text_file(
        self,
        tenant_id: str,
        data: bytes,
        metadata: dict[str, Any] | None = None,
    ) -> IngestResult:
        """Decode TXT bytes, then :meth:`ingest` them tagged ``document_type="txt"``."""
        tenant_id = require_tenant_id(tenant_id)
        try:
            text = self._text_processor.extract_text(data)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=tenant_id, stage="extract")
        return await self.ingest(tenant_id, text, {**(metadata or {}), "document_type": "txt"})

    async def ingest_many(
        self,
        tenant_id: str,
        documents: list[str],
        metadata: dict[str, Any] | None = None,
    ) -> list[IngestResult]:
        """Ingest *documents* one after another; the first failure aborts the batch."""
        tenant_id = require_tenant_id(tenant_id)
        if not isinstance(documents, list) or not all(isinstance(d, str) for d in documents):
            raise ValidationError(
                message="Documents must be an array of strings",
                tenant_id=tenant_id,
                stage="validate",
            )

        results: list[IngestResult] = []
        for position, document in enumerate(documents, start=1):
            logger.info("batch_document_started", tenant_id=tenant_id, position=position, total=len(documents))
            results.append(await self.ingest(tenant_id, document, metadata))
        return results

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_chunks(self, tenant_id: str, text: str) -> list[DocumentChunk]:
        """Split *text* and assign ids and ordinals up front."""
        try:
            pieces = self._chunker.split(text)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=tenant_id, stage="chunk")

        document_id = str(uuid.uuid4())
        ingested_at = datetime.now(timezone.utc)
        return [
            DocumentChunk(
                record_id=f"{document_id}-{index}",
                document_id=document_id,
                tenant_id=tenant_id,
                chunk_index=index,
                total_chunks=len(pieces),
                text=piece,
                ingested_at=ingested_at,
            )
            for index, piece in enumerate(pieces)
        ]

    async def _embed_and_store(self, chunk: DocumentChunk, extra: dict[str, Any]) -> None:
        logger.debug(
            "chunk_processing",
            tenant_id=chunk.tenant_id,
            chunk=chunk.chunk_index + 1,
            of=chunk.total_chunks,
        )
        try:
            vector = await self._embedding_provider.embed(chunk.text)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=chunk.tenant_id, stage="embed")

        record = StoredRecord(id=chunk.record_id, values=vector, metadata=chunk.to_metadata(extra))
        try:
            await self._vector_store.upsert(chunk.tenant_id, [record])
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=chunk.tenant_id, stage="upsert")

    async def _embed_and_store_concurrently(self, chunks: list[DocumentChunk], extra: dict[str, Any]) -> None:
        results = await throttled_gather(
            [self._embed_and_store(chunk, extra) for chunk in chunks],
            limit=self._embedding_concurrency,
            return_exceptions=True,
        )
        # report the lowest-ordinal failure once every chunk has settled
        for result in results:
            if isinstance(result, BaseException):
                raise result
