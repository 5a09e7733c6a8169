"""Pipeline services: ingestion, retrieval, answering and namespace lifecycle."""

from tenant_rag.services.answer_service import AnswerService, build_prompt
from tenant_rag.services.ingestion import IngestionService, SentenceChunker
from tenant_rag.services.namespace_service import NamespaceService
from tenant_rag.services.retrieval_service import RetrievalService

__all__ = [
    "AnswerService",
    "IngestionService",
    "NamespaceService",
    "RetrievalService",
    "SentenceChunker",
    "build_prompt",
]
