"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient``.  Fully local, no external service.

Mapping onto the namespace model:

- the *index* is a ChromaDB collection named after ``INDEX_NAME``; its
  dimension and metric live in the collection metadata,
- a *namespace* is the reserved ``_namespace`` metadata field, and every
  read, count and delete filters on it with a ``where`` clause.

A local collection is usable as soon as it exists, so ``describe_index``
always reports ``ready=True``.
"""

from __future__ import annotations

import os
from typing import Any

# Keep ChromaDB's anonymous telemetry off; the Settings flag below is the
# authoritative switch, the env var covers versions that read it first.
os.environ.setdefault("ANONYMIZED_TELEMETRY", "False")

import chromadb
import structlog

from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.rag import IndexDescription, IndexSpec, QueryMatch, StoredRecord
from tenant_rag.providers.vector_store.metadata import flatten_metadata
from tenant_rag.utils.errors import IndexNotFoundError, TransportError

logger = structlog.get_logger(logger_name=__name__)

NAMESPACE_KEY = "_namespace"

# Pinecone-style metric names -> ChromaDB hnsw:space values.
_METRIC_TO_SPACE = {"cosine": "cosine", "euclidean": "l2", "dotproduct": "ip"}
_SPACE_TO_METRIC = {space: metric for metric, space in _METRIC_TO_SPACE.items()}


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Embedding function that is never called.

    Vectors always arrive pre-computed from the embedding provider; this
    stops ChromaDB from downloading its default ONNX model on collection
    creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError("tenant-rag passes pre-computed embeddings to ChromaDB")

    def name(self) -> str:
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    Parameters
    ----------
    index_name:
        Collection used as the shared index.
    persist_directory:
        On-disk location of the ChromaDB database.
    client:
        Pre-built ChromaDB client (tests pass an ephemeral one).
    """

    def __init__(
        self,
        index_name: str,
        persist_directory: str = "./data/chromadb",
        client: Any = None,
    ) -> None:
        self._index_name = index_name
        self._persist_directory = persist_directory
        self._client = client or chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        self._collection: Any = None

    # ------------------------------------------------------------------
    # Index administration
    # ------------------------------------------------------------------

    async def describe_index(self, name: str) -> IndexDescription:
        collection = self._get_collection(name)
        meta = collection.metadata or {}
        return IndexDescription(
            name=name,
            dimension=int(meta.get("dimension", 1)),
            metric=_SPACE_TO_METRIC.get(meta.get("hnsw:space", "l2"), "euclidean"),
            ready=True,
            host=self._persist_directory,
        )

    async def create_index(self, name: str, dimension: int, metric: str, spec: IndexSpec) -> None:
        # cloud/region are meaningless for a local store
        metadata = {"hnsw:space": _METRIC_TO_SPACE.get(metric, "cosine"), "dimension": dimension}
        try:
            try:
                collection = self._client.get_or_create_collection(
                    name=name,
                    metadata=metadata,
                    embedding_function=_NoopEmbeddingFunction(),
                )
            except ValueError:
                # collection persisted with a different embedding function
                collection = self._client.get_or_create_collection(name=name, metadata=metadata)
        except Exception as exc:
            raise TransportError(
                message=f"ChromaDB create_index failed: {exc}",
                provider_name=self.get_provider_name(),
                stage="create_index",
            ) from exc

        if name == self._index_name:
            self._collection = collection
        logger.info("chromadb_index_created", index=name, dimension=dimension, metric=metric)

    # ------------------------------------------------------------------
    # Namespace-scoped data operations
    # ------------------------------------------------------------------

    async def upsert(self, namespace: str, records: list[StoredRecord]) -> int:
        if not records:
            return 0
        collection = self._data_collection()
        expected = self._dimension(collection)
        if expected:
            self._check_dimensions(records, expected)

        metadatas = []
        for record in records:
            meta = flatten_metadata(record.metadata)
            meta[NAMESPACE_KEY] = namespace
            metadatas.append(meta)

        try:
            collection.upsert(
                ids=[self._scoped_id(namespace, r.id) for r in records],
                embeddings=[r.values for r in records],
                documents=[str(r.metadata.get("text", "")) for r in records],
                metadatas=metadatas,
            )
        except Exception as exc:
            raise TransportError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
                stage="upsert",
            ) from exc

        logger.debug("chromadb_upsert", namespace=namespace, count=len(records))
        return len(records)

    async def query(self, namespace: str, vector: list[float], top_k: int) -> list[QueryMatch]:
        if top_k <= 0:
            return []
        collection = self._data_collection()
        available = await self.count(namespace)
        if available == 0:
            return []

        try:
            result = collection.query(
                query_embeddings=[vector],
                n_results=min(top_k, available),
                where={NAMESPACE_KEY: namespace},
                include=["metadatas", "distances"],
            )
        except Exception as exc:
            raise TransportError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
                stage="query",
            ) from exc

        space = (collection.metadata or {}).get("hnsw:space", "l2")
        ids = result["ids"][0] if result.get("ids") else []
        metadatas = result["metadatas"][0] if result.get("metadatas") else []
        distances = result["distances"][0] if result.get("distances") else []

        matches = []
        for record_id, meta, distance in zip(ids, metadatas, distances):
            meta = dict(meta or {})
            meta.pop(NAMESPACE_KEY, None)
            matches.append(
                QueryMatch(
                    id=self._unscoped_id(namespace, record_id),
                    score=self._distance_to_score(distance, space),
                    metadata=meta,
                )
            )
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    async def delete_all(self, namespace: str) -> None:
        collection = self._data_collection()
        try:
            if await self.count(namespace) == 0:
                return
            collection.delete(where={NAMESPACE_KEY: namespace})
        except Exception as exc:
            raise TransportError(
                message=f"ChromaDB delete_all failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
                stage="delete_all",
            ) from exc
        logger.info("chromadb_namespace_cleared", namespace=namespace)

    async def count(self, namespace: str) -> int:
        collection = self._data_collection()
        try:
            existing = collection.get(where={NAMESPACE_KEY: namespace}, include=["metadatas"])
        except Exception as exc:
            raise TransportError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
                tenant_id=namespace,
            ) from exc
        return len(existing["ids"]) if existing["ids"] else 0

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        return self._client is not None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collection_names(self) -> set[str]:
        # list_collections returns names on some ChromaDB releases, objects on others
        return {c if isinstance(c, str) else c.name for c in self._client.list_collections()}

    def _get_collection(self, name: str) -> Any:
        try:
            if name not in self._collection_names():
                raise IndexNotFoundError(index_name=name, provider_name=self.get_provider_name())
            try:
                return self._client.get_collection(name=name, embedding_function=_NoopEmbeddingFunction())
            except ValueError:
                return self._client.get_collection(name=name)
        except IndexNotFoundError:
            raise
        except Exception as exc:
            raise TransportError(
                message=f"ChromaDB describe failed: {exc}",
                provider_name=self.get_provider_name(),
                stage="describe_index",
            ) from exc

    def _data_collection(self) -> Any:
        if self._collection is None:
            self._collection = self._get_collection(self._index_name)
        return self._collection

    @staticmethod
    def _dimension(collection: Any) -> int:
        return int((collection.metadata or {}).get("dimension", 0))

    @staticmethod
    def _scoped_id(namespace: str, record_id: str) -> str:
        # ChromaDB ids are collection-wide; prefix keeps namespaces disjoint
        return f"{namespace}::{record_id}"

    @staticmethod
    def _unscoped_id(namespace: str, scoped_id: str) -> str:
        prefix = f"{namespace}::"
        return scoped_id[len(prefix):] if scoped_id.startswith(prefix) else scoped_id

    @staticmethod
    def _distance_to_score(distance: float, space: str) -> float:
        if space in ("cosine", "ip"):
            return 1.0 - float(distance)
        return -float(distance)
