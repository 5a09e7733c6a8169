"""FastAPI routes for tenant administration, ingestion and question answering.

Service dependencies are built once in ``main.build_components``, stored on
``app.state`` and resolved per request through small ``_get_*`` helpers
declared with the ``Annotated`` + ``Depends`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                                     Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/tenants                              GET     List registered tenants
# /api/v1/tenants/{tenant_id}                  POST    Create tenant / ensure index
# /api/v1/tenants/{tenant_id}                  DELETE  Delete tenant (docs + registry)
# /api/v1/tenants/{tenant_id}/documents        POST    Ingest plain-text documents
# /api/v1/tenants/{tenant_id}/documents        DELETE  Clear tenant documents
# /api/v1/tenants/{tenant_id}/documents/pdf    POST    Upload + ingest a PDF
# /api/v1/tenants/{tenant_id}/documents/txt    POST    Upload + ingest a TXT file
# /api/v1/tenants/{tenant_id}/search           POST    Similarity search
# /api/v1/tenants/{tenant_id}/ask              POST    Answer a question
# /health                                      GET     Liveness (mounted in main.py)
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from tenant_rag.api.schemas import (
    AddDocumentsRequest,
    AskRequest,
    AskResponse,
    ErrorResponse,
    IngestResponse,
    SearchRequest,
    SearchResponse,
    TenantListResponse,
    TenantResponse,
    TenantSummary,
)
from tenant_rag.services.answer_service import AnswerService
from tenant_rag.services.ingestion.ingestion_service import IngestionService
from tenant_rag.services.namespace_service import NamespaceService
from tenant_rag.services.retrieval_service import RetrievalService
from tenant_rag.services.validation import require_text
from tenant_rag.utils.logging import bind_tenant, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_UPLOAD_CHUNK_SIZE = 64 * 1024  # 64 KB
_DEFAULT_MAX_UPLOAD = 10 * 1024 * 1024
_DEFAULT_TITLE = "Untitled Document"
_DEFAULT_AUTHOR = "Unknown Author"

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependency injection helpers -- resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_retrieval_service(request: Request) -> RetrievalService:
    return request.app.state.retrieval_service


def _get_answer_service(request: Request) -> AnswerService:
    return request.app.state.answer_service


def _get_namespace_service(request: Request) -> NamespaceService:
    return request.app.state.namespace_service


def _get_max_upload_bytes(request: Request) -> int:
    return getattr(request.app.state, "max_upload_bytes", _DEFAULT_MAX_UPLOAD)


IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
RetrievalDep = Annotated[RetrievalService, Depends(_get_retrieval_service)]
AnswerDep = Annotated[AnswerService, Depends(_get_answer_service)]
NamespaceDep = Annotated[NamespaceService, Depends(_get_namespace_service)]
MaxUploadDep = Annotated[int, Depends(_get_max_upload_bytes)]


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read *file* in 64 KB pieces, rejecting it with 413 once it passes *max_bytes*."""
    pieces: list[bytes] = []
    total = 0
    while True:
        piece = await file.read(_UPLOAD_CHUNK_SIZE)
        if not piece:
            break
        total += len(piece)
        if total > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large: maximum is {max_bytes // (1024 * 1024)} MB.",
            )
        pieces.append(piece)
    return b"".join(pieces)


def _upload_metadata(file: UploadFile, size: int, title: str | None, author: str | None) -> dict[str, Any]:
    return {
        "title": title or _DEFAULT_TITLE,
        "author": author or _DEFAULT_AUTHOR,
        "filename": file.filename,
        "filesize": size,
        "upload_date": datetime.now(timezone.utc).isoformat(),
    }


# ---------------------------------------------------------------------------
# Tenant administration
# ---------------------------------------------------------------------------


@router.get("/tenants", response_model=TenantListResponse, summary="List registered tenants")
async def list_tenants(namespaces: NamespaceDep) -> TenantListResponse:
    records = await namespaces.list_tenants()
    return TenantListResponse(
        tenants=[TenantSummary(tenant_id=r.tenant_id, created_at=r.created_at) for r in records],
        total=len(records),
    )


@router.post(
    "/tenants/{tenant_id}",
    response_model=TenantResponse,
    responses={**_ERROR_RESPONSES, 503: {"model": ErrorResponse}},
    summary="Create a tenant and make sure the shared index is ready",
)
async def create_tenant(tenant_id: str, namespaces: NamespaceDep) -> TenantResponse:
    bind_tenant(tenant_id)
    return TenantResponse.from_result(await namespaces.create_tenant(tenant_id))


@router.delete(
    "/tenants/{tenant_id}",
    response_model=TenantResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a tenant's documents and registry entry",
)
async def delete_tenant(tenant_id: str, namespaces: NamespaceDep) -> TenantResponse:
    bind_tenant(tenant_id)
    return TenantResponse.from_result(await namespaces.delete_tenant(tenant_id))


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post(
    "/tenants/{tenant_id}/documents",
    response_model=IngestResponse,
    responses={**_ERROR_RESPONSES, 422: {"model": ErrorResponse}},
    summary="Ingest plain-text documents",
)
async def add_documents(tenant_id: str, body: AddDocumentsRequest, ingestion: IngestionDep) -> IngestResponse:
    bind_tenant(tenant_id)
    results = await ingestion.ingest_many(tenant_id, body.documents, body.metadata)
    return IngestResponse.from_results(tenant_id, results)


@router.post(
    "/tenants/{tenant_id}/documents/pdf",
    response_model=IngestResponse,
    responses={**_ERROR_RESPONSES, 413: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Upload and ingest a PDF document",
)
async def upload_pdf(
    tenant_id: str,
    ingestion: IngestionDep,
    max_upload_bytes: MaxUploadDep,
    pdf: Annotated[UploadFile | None, File()] = None,
    title: Annotated[str | None, Form()] = None,
    author: Annotated[str | None, Form()] = None,
) -> IngestResponse:
    bind_tenant(tenant_id)
    if pdf is None:
        raise HTTPException(status_code=400, detail="No PDF file uploaded")
    data = await _read_upload(pdf, max_upload_bytes)
    result = await ingestion.ingest_pdf(tenant_id, data, _upload_metadata(pdf, len(data), title, author))
    return IngestResponse.from_results(tenant_id, [result])


@router.post(
    "/tenants/{tenant_id}/documents/txt",
    response_model=IngestResponse,
    responses={**_ERROR_RESPONSES, 413: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Upload and ingest a plain-text file",
)
async def upload_txt(
    tenant_id: str,
    ingestion: IngestionDep,
    max_upload_bytes: MaxUploadDep,
    txt: Annotated[UploadFile | None, File()] = None,
    title: Annotated[str | None, Form()] = None,
    author: Annotated[str | None, Form()] = None,
) -> IngestResponse:
    bind_tenant(tenant_id)
    if txt is None:
        raise HTTPException(status_code=400, detail="No TXT file uploaded")
    data = await _read_upload(txt, max_upload_bytes)
    result = await ingestion.ingest_text_file(tenant_id, data, _upload_metadata(txt, len(data), title, author))
    return IngestResponse.from_results(tenant_id, [result])


@router.delete(
    "/tenants/{tenant_id}/documents",
    response_model=TenantResponse,
    responses=_ERROR_RESPONSES,
    summary="Remove every document of a tenant",
)
async def clear_documents(tenant_id: str, namespaces: NamespaceDep) -> TenantResponse:
    bind_tenant(tenant_id)
    return TenantResponse.from_result(await namespaces.clear_namespace(tenant_id))


# ---------------------------------------------------------------------------
# Retrieval / answering
# ---------------------------------------------------------------------------


@router.post(
    "/tenants/{tenant_id}/search",
    response_model=SearchResponse,
    responses=_ERROR_RESPONSES,
    summary="Similarity search over a tenant's documents",
)
async def search_documents(tenant_id: str, body: SearchRequest, retrieval: RetrievalDep) -> SearchResponse:
    bind_tenant(tenant_id)
    query = require_text(body.query, "Query", tenant_id=tenant_id)
    results = await retrieval.retrieve(tenant_id, query, body.top_k)
    return SearchResponse(tenant_id=tenant_id, query=query, results=results)


@router.post(
    "/tenants/{tenant_id}/ask",
    response_model=AskResponse,
    responses=_ERROR_RESPONSES,
    summary="Answer a question from a tenant's documents",
)
async def ask_question(tenant_id: str, body: AskRequest, answers: AnswerDep) -> AskResponse:
    bind_tenant(tenant_id)
    result = await answers.answer(tenant_id, body.question)
    return AskResponse(**result.model_dump())
