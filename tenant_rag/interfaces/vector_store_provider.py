"""Abstract base class for namespace-partitioned vector index providers.

One shared index holds every tenant's records; each tenant owns exactly
one namespace inside it.  Data operations (upsert / query / delete_all /
count) always take the namespace explicitly so no call can touch another
tenant's records.  Administrative operations (describe / create) act on
the index as a whole.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tenant_rag.models.rag import IndexDescription, IndexSpec, QueryMatch, StoredRecord
from tenant_rag.utils.errors import DimensionMismatch


# Concrete implementations (tenant_rag/providers/vector_store/):
#   ChromaDBProvider  -- local persistent index, namespace = metadata filter
#   PineconeProvider  -- hosted serverless index, native namespaces
class IVectorStoreProvider(ABC):
    """Contract for vector index backends used by the RAG pipeline."""

    # -- index administration ------------------------------------------------

    @abstractmethod
    async def describe_index(self, name: str) -> IndexDescription:
        """Return the status of index *name*.

        Raises
        ------
        tenant_rag.utils.errors.IndexNotFoundError
            The index does not exist.
        tenant_rag.utils.errors.TransportError
            The store could not be reached.
        """

    @abstractmethod
    async def create_index(
        self,
        name: str,
        dimension: int,
        metric: str,
        spec: IndexSpec,
    ) -> None:
        """Start creating index *name*.  Readiness may lag behind on hosted stores."""

    # -- namespace-scoped data operations -----------------------------------

    @abstractmethod
    async def upsert(self, namespace: str, records: list[StoredRecord]) -> int:
        """Insert or replace *records* in *namespace*; return how many were written.

        Raises
        ------
        tenant_rag.utils.errors.DimensionMismatch
            A vector's length differs from the index dimension.  Nothing
            from the batch is written.
        """

    @abstractmethod
    async def query(self, namespace: str, vector: list[float], top_k: int) -> list[QueryMatch]:
        """Return at most *top_k* matches from *namespace*, best score first.

        An empty or never-written namespace yields ``[]``.
        """

    @abstractmethod
    async def delete_all(self, namespace: str) -> None:
        """Remove every record in *namespace*.  A no-op when it is already empty."""

    @abstractmethod
    async def count(self, namespace: str) -> int:
        """Return the number of records stored in *namespace*."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the backend client was constructed successfully."""

    # -- shared helpers ------------------------------------------------------

    def _check_dimensions(self, records: list[StoredRecord], expected: int) -> None:
        for record in records:
            if len(record.values) != expected:
                raise DimensionMismatch(
                    expected=expected,
                    actual=len(record.values),
                    provider_name=self.get_provider_name(),
                    stage="upsert",
                )
