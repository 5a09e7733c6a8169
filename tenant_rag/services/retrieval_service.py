"""Retrieval pipeline: embed the query, search the tenant's namespace.

The store's ranking is kept as-is (best similarity first) and ``top_k`` is a
cap, not a quota: a namespace with fewer records simply returns fewer hits.
Nothing is cached; every call re-embeds the query.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tenant_rag.models.rag import RetrievedDocument
from tenant_rag.services.validation import require_tenant_id, require_text
from tenant_rag.utils.errors import RagPipelineError, ValidationError

if TYPE_CHECKING:
    from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
    from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class RetrievalService:
    """Finds the stored chunks most similar to a query within one namespace."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store

    async def retrieve(self, tenant_id: str, query: str, top_k: int) -> list[RetrievedDocument]:
        """Return up to *top_k* documents from *tenant_id*'s namespace, best first.

        Each result carries the stored chunk text, the similarity score and
        the full stored metadata.
        """
        tenant_id = require_tenant_id(tenant_id)
        require_text(query, "Query", tenant_id=tenant_id)
        if not isinstance(top_k, int) or top_k <= 0:
            raise ValidationError(message="top_k must be a positive integer", tenant_id=tenant_id, stage="validate")

        try:
            vector = await self._embedding_provider.embed(query)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=tenant_id, stage="embed")

        try:
            matches = await self._vector_store.query(tenant_id, vector, top_k)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=tenant_id, stage="retrieve")

        documents = []
        for match in matches[:top_k]:
            documents.append(
                RetrievedDocument(
                    text=str(match.metadata.get("text", "")),
                    similarity=match.score,
                    metadata=dict(match.metadata),
                )
            )

        logger.info("documents_retrieved", tenant_id=tenant_id, top_k=top_k, returned=len(documents))
        return documents
