"""tenant-rag API layer -- routes, schemas, and middleware."""

from tenant_rag.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from tenant_rag.api.routes import router
from tenant_rag.api.schemas import (
    AskRequest,
    AskResponse,
    ErrorResponse,
    HealthResponse,
    IngestResponse,
    TenantResponse,
)

__all__ = [
    "AskRequest",
    "AskResponse",
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "HealthResponse",
    "IngestResponse",
    "RequestLoggingMiddleware",
    "TenantResponse",
    "configure_cors",
    "router",
]
