"""tenant-rag FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging at import time.

``build_components`` is also used by the CLI tools, which need the same
provider selection without a web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request

from tenant_rag import __version__
from tenant_rag.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from tenant_rag.api.routes import router as api_router
from tenant_rag.api.schemas import HealthResponse
from tenant_rag.config.loader import load_config
from tenant_rag.config.settings import Settings
from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.interfaces.llm_provider import ILLMProvider
from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.rag import IndexSpec
from tenant_rag.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from tenant_rag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from tenant_rag.providers.llm.ollama_provider import OllamaLLMProvider
from tenant_rag.providers.llm.openai_provider import OpenAILLMProvider
from tenant_rag.providers.tenant_registry.sqlite_tenant_registry import SQLiteTenantRegistry
from tenant_rag.services.answer_service import AnswerService
from tenant_rag.services.ingestion.chunker import SentenceChunker
from tenant_rag.services.ingestion.ingestion_service import IngestionService
from tenant_rag.services.namespace_service import NamespaceService
from tenant_rag.services.retrieval_service import RetrievalService
from tenant_rag.utils.logging import configure_logging, get_logger
from tenant_rag.utils.retry import RetryPolicy

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_embedding_provider(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    retry_policy: RetryPolicy | None = None,
) -> IEmbeddingProvider:
    """Select the embedding backend named by ``EMBEDDING_BACKEND``."""
    if app_settings.embedding_backend == "openai":
        return OpenAIEmbeddingProvider(settings=app_settings, retry_policy=retry_policy)
    return OllamaEmbeddingProvider(settings=app_settings, http_client=http_client, retry_policy=retry_policy)


def _build_llm_provider(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    retry_policy: RetryPolicy | None = None,
) -> ILLMProvider:
    """Select the generation backend named by ``GENERATION_BACKEND``."""
    if app_settings.generation_backend == "openai":
        return OpenAILLMProvider(settings=app_settings, retry_policy=retry_policy)
    return OllamaLLMProvider(settings=app_settings, http_client=http_client, retry_policy=retry_policy)


def _build_vector_store(app_settings: Settings) -> IVectorStoreProvider:
    """Select the vector store backend.

    Pinecone is imported lazily so a ChromaDB-only deployment never loads
    the SDK.  A missing ``PINECONE_API_KEY`` raises ``ConfigurationError``.
    """
    if app_settings.vector_store_backend == "pinecone":
        from tenant_rag.providers.vector_store.pinecone_provider import PineconeProvider

        return PineconeProvider(index_name=app_settings.index_name, api_key=app_settings.pinecone_api_key)

    from tenant_rag.providers.vector_store.chromadb_provider import ChromaDBProvider

    return ChromaDBProvider(
        index_name=app_settings.index_name,
        persist_directory=app_settings.chromadb_persist_dir,
    )


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_components(app_settings: Settings, app_config: dict | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    app_config = app_config or {}
    answer_cfg = app_config.get("answer", {})

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=app_settings.http_timeout)
    http_retry = app_settings.http_retry_policy()

    # -- Providers --
    embedding_provider = _build_embedding_provider(app_settings, http_client, http_retry)
    llm_provider = _build_llm_provider(app_settings, http_client, http_retry)
    vector_store = _build_vector_store(app_settings)
    tenant_registry = SQLiteTenantRegistry(db_path=app_settings.tenant_db_path)

    # -- Services --
    ingestion_service = IngestionService(
        chunker=SentenceChunker(max_size=app_settings.chunk_size),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        embedding_concurrency=app_settings.embedding_concurrency,
    )
    retrieval_service = RetrievalService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
    )
    answer_kwargs: dict[str, Any] = {
        key: answer_cfg[key] for key in ("system_prompt", "context_separator", "preview_chars") if key in answer_cfg
    }
    answer_service = AnswerService(
        retrieval_service=retrieval_service,
        llm_provider=llm_provider,
        top_k=app_settings.answer_top_k,
        **answer_kwargs,
    )
    namespace_service = NamespaceService(
        vector_store=vector_store,
        index_name=app_settings.index_name,
        dimension=app_settings.embedding_dimension,
        metric=app_settings.index_metric,
        index_spec=IndexSpec(cloud=app_settings.pinecone_cloud, region=app_settings.pinecone_region),
        readiness_policy=app_settings.readiness_policy(),
        tenant_registry=tenant_registry,
    )

    return {
        "http_client": http_client,
        "embedding_provider": embedding_provider,
        "llm_provider": llm_provider,
        "vector_store": vector_store,
        "tenant_registry": tenant_registry,
        "ingestion_service": ingestion_service,
        "retrieval_service": retrieval_service,
        "answer_service": answer_service,
        "namespace_service": namespace_service,
        "max_upload_bytes": app_settings.max_upload_bytes,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_components(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["tenant_registry"].initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        vector_store=components["vector_store"].get_provider_name(),
        embedding_provider=components["embedding_provider"].get_provider_name(),
        llm_provider=components["llm_provider"].get_provider_name(),
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def _provider_name(state: Any, attr: str) -> str:
    provider = getattr(state, attr, None)
    return provider.get_provider_name() if provider is not None else "unconfigured"


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="tenant-rag API",
        version=__version__,
        description=(
            "Multi-tenant retrieval-augmented generation: ingest documents into "
            "per-tenant namespaces of one shared vector index, then search them "
            "or ask questions answered from the tenant's own documents."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    @application.get("/health", response_model=HealthResponse, tags=["health"])
    async def health(request: Request) -> HealthResponse:
        state = request.app.state
        return HealthResponse(
            version=__version__,
            vector_store=_provider_name(state, "vector_store"),
            embedding_provider=_provider_name(state, "embedding_provider"),
            llm_provider=_provider_name(state, "llm_provider"),
        )

    return application


app = create_app()


def serve() -> None:
    """Console-script entry point: run the API under uvicorn."""
    uvicorn.run(
        "tenant_rag.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    serve()
