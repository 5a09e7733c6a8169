"""Shared utilities: errors, logging, text normalization, retry, concurrency."""

from tenant_rag.utils.errors import (
    ConfigurationError,
    DimensionMismatch,
    IndexNotFoundError,
    IndexNotReadyError,
    InvalidResponseFormat,
    NamespaceNotFound,
    ProcessingError,
    RagPipelineError,
    TransportError,
    ValidationError,
)
from tenant_rag.utils.logging import configure_logging, get_logger
from tenant_rag.utils.text_normalizer import normalize_text

__all__ = [
    "ConfigurationError",
    "DimensionMismatch",
    "IndexNotFoundError",
    "IndexNotReadyError",
    "InvalidResponseFormat",
    "NamespaceNotFound",
    "ProcessingError",
    "RagPipelineError",
    "TransportError",
    "ValidationError",
    "configure_logging",
    "get_logger",
    "normalize_text",
]
