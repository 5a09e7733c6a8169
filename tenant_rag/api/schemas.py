"""Pydantic request/response schemas for the tenant-rag HTTP API.

Request schemas end with "Request", response schemas with "Response".
Request fields that clients may send malformed (``documents``
as a non-list, a missing ``question``) are typed loosely on purpose: the
services reject them with ValidationError, which the API reports as 400
rather than FastAPI's generic 422.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from tenant_rag.models.rag import IngestResult, NamespaceResult, RetrievedDocument


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    vector_store: str
    embedding_provider: str
    llm_provider: str


class TenantResponse(BaseModel):
    """Result of creating, clearing or deleting a tenant."""

    tenant_id: str
    success: bool = True
    message: str
    index_created: bool = False

    @classmethod
    def from_result(cls, result: NamespaceResult) -> "TenantResponse":
        return cls(**result.model_dump())


class TenantSummary(BaseModel):
    tenant_id: str
    created_at: datetime


class TenantListResponse(BaseModel):
    tenants: list[TenantSummary] = Field(default_factory=list)
    total: int = 0


class AddDocumentsRequest(BaseModel):
    """Plain-text documents to ingest for one tenant."""

    documents: Any = Field(default=None, description="Array of document strings.")
    metadata: dict[str, Any] | None = Field(default=None, description="Metadata attached to every document.")


class IngestResponse(BaseModel):
    success: bool = True
    message: str
    tenant_id: str
    results: list[IngestResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, tenant_id: str, results: list[IngestResult]) -> "IngestResponse":
        chunk_total = sum(r.chunk_count for r in results)
        return cls(
            message=f"Successfully processed {len(results)} documents ({chunk_total} chunks)",
            tenant_id=tenant_id,
            results=results,
        )


class SearchRequest(BaseModel):
    query: str | None = None
    top_k: int = Field(default=5, ge=1, le=100)


class SearchResponse(BaseModel):
    tenant_id: str
    query: str
    results: list[RetrievedDocument] = Field(default_factory=list)


class AskRequest(BaseModel):
    question: str | None = Field(default=None, max_length=4000)


class AskResponse(BaseModel):
    question: str
    relevant_documents: list[RetrievedDocument] = Field(default_factory=list)
    answer: str


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    tenant_id: str | None = None
    stage: str | None = None
