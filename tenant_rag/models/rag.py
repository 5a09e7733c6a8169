"""RAG pipeline data models.

Pydantic v2 models for the units that flow through ingestion, storage,
retrieval and answering.  All models are frozen: a chunk or a query result
is never mutated once built.

Lifecycle for one document::

    raw text --chunker--> list[str]
             --IngestionService--> DocumentChunk (ordinal, total, text, tenant)
             --embed--> StoredRecord (id, vector, metadata)  --> vector store
    question --RetrievalService--> QueryMatch --> RetrievedDocument
             --AnswerService--> AnswerResult
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------
class DocumentChunk(BaseModel):
    """A sentence-aligned slice of a normalized document, before embedding."""

    model_config = ConfigDict(frozen=True)

    record_id: str = Field(description="Identifier the chunk is stored under (unique per chunk).")
    document_id: str = Field(description="UUID shared by every chunk of the same document.")
    tenant_id: str = Field(description="Owning tenant; also the vector-store namespace.")
    chunk_index: int = Field(ge=0, description="0-based ordinal within the document.")
    total_chunks: int = Field(ge=1, description="Number of chunks the document produced.")
    text: str = Field(description="Chunk text as produced by the chunker.")
    ingested_at: datetime = Field(description="UTC timestamp shared by the document's chunks.")

    def to_metadata(self, extra: dict[str, Any] | None = None) -> dict[str, Any]:
        """Build the stored metadata payload: caller metadata first, pipeline fields win."""
        payload: dict[str, Any] = dict(extra or {})
        payload.update(
            {
                "text": self.text,
                "chunk_index": self.chunk_index,
                "total_chunks": self.total_chunks,
                "timestamp": self.ingested_at.isoformat(),
                "tenant_id": self.tenant_id,
                "document_id": self.document_id,
            }
        )
        return payload


class StoredRecord(BaseModel):
    """The persisted unit inside the vector store."""

    model_config = ConfigDict(frozen=True)

    id: str
    values: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChunkPreview(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str


class IngestResult(BaseModel):
    """Outcome of ingesting one document for one tenant."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    document_id: str
    chunk_count: int = Field(ge=0)
    chunk_ids: list[str] = Field(default_factory=list)
    chunks: list[ChunkPreview] = Field(default_factory=list)
    elapsed_seconds: float = Field(default=0.0, ge=0.0)

    @property
    def message(self) -> str:
        return f"Successfully processed {self.chunk_count} chunks"


# ---------------------------------------------------------------------------
# Index administration
# ---------------------------------------------------------------------------
class IndexState(str, Enum):
    """Where the shared index sits in the ensure-ready state machine."""

    UNKNOWN = "unknown"
    CREATING = "creating"
    READY = "ready"
    FAILED = "failed"


class IndexSpec(BaseModel):
    """Hosting region spec used when a store has to create the index."""

    model_config = ConfigDict(frozen=True)

    cloud: str = "aws"
    region: str = "us-east-1"


class IndexDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    dimension: int = Field(ge=1)
    metric: str = "cosine"
    ready: bool = False
    host: str | None = None


class NamespaceResult(BaseModel):
    """Result of a tenant-administration call (create / clear / delete)."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    success: bool = True
    message: str
    index_created: bool = False


# ---------------------------------------------------------------------------
# Retrieval / answering
# ---------------------------------------------------------------------------
class QueryMatch(BaseModel):
    """One nearest-neighbour hit as reported by the vector store."""

    model_config = ConfigDict(frozen=True)

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class RetrievedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    similarity: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class AnswerResult(BaseModel):
    """Structured answer: the question, the context documents and the generated text."""

    model_config = ConfigDict(frozen=True)

    question: str
    relevant_documents: list[RetrievedDocument] = Field(default_factory=list)
    answer: str

    def format_summary(self, preview_chars: int = 100) -> str:
        """Human-readable rendering used by the console mode."""
        lines = [f"Question: {self.question}", "", "Relevant documents:"]
        for i, doc in enumerate(self.relevant_documents, start=1):
            lines.append(f"{i}. {doc.text[:preview_chars]}... (similarity: {doc.similarity:.3f})")
        lines.extend(["", f"Answer: {self.answer}"])
        return "\n".join(lines)
