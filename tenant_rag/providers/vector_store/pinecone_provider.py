"""Pinecone vector store provider adapter.

Wraps the synchronous ``pinecone`` SDK.  Each SDK call runs in a worker
thread via ``asyncio.to_thread`` so request handlers are not blocked
while Pinecone answers.

Pinecone partitions an index into namespaces natively, so a tenant id is
passed straight through as the ``namespace`` argument.  A serverless index
is created asynchronously on Pinecone's side: ``describe_index`` reports
``ready=False`` until it can take traffic, which is what the namespace
service polls for.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from pinecone import Pinecone, ServerlessSpec
from pinecone.exceptions import NotFoundException, PineconeException

from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.rag import IndexDescription, IndexSpec, QueryMatch, StoredRecord
from tenant_rag.providers.vector_store.metadata import flatten_metadata
from tenant_rag.utils.errors import ConfigurationError, IndexNotFoundError, TransportError

logger = structlog.get_logger(logger_name=__name__)


def _field(obj: Any, key: str, default: Any = None) -> Any:
    """Read *key* from an SDK model that may be an object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


class PineconeProvider(IVectorStoreProvider):
    """Vector store provider backed by a Pinecone serverless index.

    Parameters
    ----------
    index_name:
        Name of the shared index every tenant's namespace lives in.
    api_key:
        Pinecone API key; required unless *client* is given.
    client:
        Pre-built ``Pinecone`` client (tests pass a mock).
    """

    def __init__(self, index_name: str, api_key: str = "", client: Any = None) -> None:
        if client is None:
            if not api_key:
                raise ConfigurationError(
                    message="PINECONE_API_KEY is required for the pinecone vector store",
                    provider_name="pinecone",
                )
            client = Pinecone(api_key=api_key)
        self._client = client
        self._index_name = index_name
        self._index: Any = None
        self._dimension: int | None = None

    # ------------------------------------------------------------------
    # Index administration
    # ------------------------------------------------------------------

    async def describe_index(self, name: str) -> IndexDescription:
        try:
            desc = await asyncio.to_thread(self._client.describe_index, name)
        except NotFoundException as exc:
            raise IndexNotFoundError(index_name=name, provider_name=self.get_provider_name()) from exc
        except PineconeException as exc:
            raise TransportError(
                message=f"Pinecone describe_index failed: {exc}",
                provider_name=self.get_provider_name(),
                stage="describe_index",
            ) from exc

        status = _field(desc, "status", {})
        description = IndexDescription(
            name=_field(desc, "name", name),
            dimension=int(_field(desc, "dimension", 0) or 1),
            metric=str(_field(desc, "metric", "cosine")),
            ready=bool(_field(status, "ready", False)),
            host=_field(desc, "host"),
        )
        if name == self._index_name:
            self._dimension = description.dimension
        return description

    async def create_index(self, name: str, dimension: int, metric: str, spec: IndexSpec) -> None:
        try:
            await asyncio.to_thread(
                self._client.create_index,
                name=name,
                dimension=dimension,
                metric=metric,
                spec=ServerlessSpec(cloud=spec.cloud, region=spec.region),
            )
        except PineconeException as exc:
            raise TransportError(
                message=f"Pinecone create_index failed: {exc}",
                provider_name=self.get_provider_name(),
                stage="create_index",
            ) from exc
        if name == self._index_name:
            self._dimension = dimension
        logger.info(
            "pinecone_index_create_requested",
            index=name,
            dimension=dimension,
            metric=metric,
            cloud=spec.cloud,
            region=spec.region,
        )

    # ------------------------------------------------------------------
    # Namespace-scoped data operations
    # ------------------------------------------------------------------

    async def upsert(self, namespace: str, records: list[StoredRecord]) -> int:
        if not records:
            return 0
        self._check_dimensions(records, await self._index_dimension())
        vectors = [
            {"id": r.id, "values": r.values, "metadata": flatten_metadata(r.metadata)}
            for r in records
        ]
        index = await self._resolved_index(namespace, stage="upsert")
        try:
            await asyncio.to_thread(index.upsert, vectors=vectors, namespace=namespace)
        except PineconeException as exc:
            raise TransportError(
                message=f"Pinecone upsert failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
                stage="upsert",
            ) from exc
        logger.debug("pinecone_upsert", namespace=namespace, count=len(vectors))
        return len(vectors)

    async def query(self, namespace: str, vector: list[float], top_k: int) -> list[QueryMatch]:
        if top_k <= 0:
            return []
        index = await self._resolved_index(namespace, stage="query")
        try:
            response = await asyncio.to_thread(
                index.query,
                vector=vector,
                top_k=top_k,
                include_metadata=True,
                namespace=namespace,
            )
        except PineconeException as exc:
            raise TransportError(
                message=f"Pinecone query failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
                stage="query",
            ) from exc

        matches = [
            QueryMatch(
                id=str(_field(m, "id")),
                score=float(_field(m, "score", 0.0)),
                metadata=dict(_field(m, "metadata") or {}),
            )
            for m in (_field(response, "matches") or [])
        ]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    async def delete_all(self, namespace: str) -> None:
        index = await self._resolved_index(namespace, stage="delete_all")
        try:
            await asyncio.to_thread(index.delete, delete_all=True, namespace=namespace)
        except NotFoundException:
            # namespace never written or already emptied
            logger.debug("pinecone_namespace_absent", namespace=namespace)
            return
        except PineconeException as exc:
            raise TransportError(
                message=f"Pinecone delete_all failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
                stage="delete_all",
            ) from exc
        logger.info("pinecone_namespace_cleared", namespace=namespace)

    async def count(self, namespace: str) -> int:
        index = await self._resolved_index(namespace, stage="count")
        try:
            stats = await asyncio.to_thread(index.describe_index_stats)
        except PineconeException as exc:
            raise TransportError(
                message=f"Pinecone describe_index_stats failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
            ) from exc
        namespaces = _field(stats, "namespaces") or {}
        summary = namespaces.get(namespace)
        return int(_field(summary, "vector_count", 0)) if summary is not None else 0

    def get_provider_name(self) -> str:
        return "pinecone"

    def is_available(self) -> bool:
        return self._client is not None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _data_index(self) -> Any:
        if self._index is None:
            self._index = self._client.Index(self._index_name)
        return self._index

    async def _resolved_index(self, namespace: str, stage: str) -> Any:
        """Return the data-plane handle, resolving its host off the event loop.

        Resolving the host describes the index, so a missing index surfaces
        here as :class:`IndexNotFoundError` rather than as an absent namespace.
        """
        try:
            return await asyncio.to_thread(self._data_index)
        except NotFoundException as exc:
            raise IndexNotFoundError(
                index_name=self._index_name,
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
                stage=stage,
            ) from exc
        except PineconeException as exc:
            raise TransportError(
                message=f"Pinecone index lookup failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
                stage=stage,
            ) from exc

    async def _index_dimension(self) -> int:
        if self._dimension is None:
            await self.describe_index(self._index_name)
        return self._dimension
