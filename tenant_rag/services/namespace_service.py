"""Tenant namespace lifecycle on top of one shared vector index.

Ensure-ready protocol for the shared index::

    UNKNOWN --describe ok--------------------------------> READY
    UNKNOWN --describe: not found--> CREATING --poll ok--> READY
                                     CREATING --poll exhausted--> FAILED

Namespaces themselves need no creation; a tenant's namespace appears with
its first upsert.  "Clear" empties a namespace.  "Delete" also forgets the
tenant in the registry when one is configured; without a registry the two
are the same store operation.

No lock serializes calls for the same tenant: a clear racing an in-flight
ingest may or may not see the records that ingest is still writing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tenant_rag.models.rag import IndexSpec, IndexState, NamespaceResult
from tenant_rag.models.tenant import TenantRecord
from tenant_rag.services.validation import require_tenant_id
from tenant_rag.utils.errors import IndexNotFoundError, IndexNotReadyError, RagPipelineError
from tenant_rag.utils.retry import RetryPolicy, poll_until

if TYPE_CHECKING:
    from tenant_rag.interfaces.tenant_registry_provider import ITenantRegistry
    from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class NamespaceService:
    """Creates, clears and deletes tenant namespaces.

    Parameters
    ----------
    vector_store:
        Backend holding the shared index.
    index_name:
        Name of the shared index.
    dimension:
        Dimension to create the index with; must match the embedding model.
    metric:
        Similarity metric for a newly created index.
    index_spec:
        Hosting cloud/region for a newly created index.
    readiness_policy:
        Polling schedule while a new index comes up (2 s x 10 by default).
    tenant_registry:
        Optional registry giving tenants an identity beyond their namespace.
    """

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        index_name: str,
        dimension: int,
        metric: str = "cosine",
        index_spec: IndexSpec | None = None,
        readiness_policy: RetryPolicy | None = None,
        tenant_registry: ITenantRegistry | None = None,
    ) -> None:
        self._vector_store = vector_store
        self._index_name = index_name
        self._dimension = dimension
        self._metric = metric
        self._index_spec = index_spec or IndexSpec()
        self._readiness_policy = readiness_policy or RetryPolicy()
        self._registry = tenant_registry
        self._index_state = IndexState.UNKNOWN

    @property
    def index_state(self) -> IndexState:
        return self._index_state

    @property
    def index_name(self) -> str:
        return self._index_name

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def ensure_namespace_ready(self, tenant_id: str) -> NamespaceResult:
        """Make sure the shared index exists and is ready to serve *tenant_id*.

        Raises
        ------
        IndexNotReadyError
            The index was created but never reported ready within the policy.
        TransportError
            The store could not be reached.
        """
        tenant_id = require_tenant_id(tenant_id)
        try:
            await self._vector_store.describe_index(self._index_name)
        except IndexNotFoundError:
            logger.info("index_missing", index=self._index_name, tenant_id=tenant_id)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=tenant_id, stage="describe_index")
        else:
            self._index_state = IndexState.READY
            logger.info("index_ready", index=self._index_name, tenant_id=tenant_id)
            return NamespaceResult(tenant_id=tenant_id, message=f"Index ready for tenant {tenant_id}")

        self._index_state = IndexState.CREATING
        try:
            await self._vector_store.create_index(
                self._index_name,
                dimension=self._dimension,
                metric=self._metric,
                spec=self._index_spec,
            )
            attempts = await poll_until(
                self._index_is_ready,
                self._readiness_policy,
                index_name=self._index_name,
            )
        except IndexNotReadyError as exc:
            self._index_state = IndexState.FAILED
            logger.error("index_not_ready", index=self._index_name, attempts=exc.attempts, tenant_id=tenant_id)
            raise exc.with_context(tenant_id=tenant_id)
        except RagPipelineError as exc:
            self._index_state = IndexState.FAILED
            raise exc.with_context(tenant_id=tenant_id, stage="create_index")

        self._index_state = IndexState.READY
        logger.info("index_created", index=self._index_name, attempts=attempts, tenant_id=tenant_id)
        return NamespaceResult(
            tenant_id=tenant_id,
            message=f"Created index and ready for tenant {tenant_id}",
            index_created=True,
        )

    async def create_tenant(self, tenant_id: str) -> NamespaceResult:
        """Ensure the index is ready, then register *tenant_id* (if a registry is configured)."""
        result = await self.ensure_namespace_ready(tenant_id)
        if self._registry is not None:
            await self._registry.register(result.tenant_id)
        return result

    async def clear_namespace(self, tenant_id: str) -> NamespaceResult:
        """Delete every record in *tenant_id*'s namespace.  Other tenants are untouched."""
        tenant_id = require_tenant_id(tenant_id)
        try:
            await self._vector_store.delete_all(tenant_id)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=tenant_id, stage="delete_all")
        logger.info("namespace_cleared", tenant_id=tenant_id)
        return NamespaceResult(tenant_id=tenant_id, message=f"Documents cleared successfully for tenant {tenant_id}")

    async def delete_tenant(self, tenant_id: str) -> NamespaceResult:
        """Clear *tenant_id*'s documents and remove it from the registry."""
        tenant_id = require_tenant_id(tenant_id)
        await self.clear_namespace(tenant_id)
        if self._registry is not None:
            await self._registry.remove(tenant_id)
        logger.info("tenant_deleted", tenant_id=tenant_id)
        return NamespaceResult(tenant_id=tenant_id, message=f"Deleted all documents for tenant {tenant_id}")

    async def list_tenants(self) -> list[TenantRecord]:
        if self._registry is None:
            return []
        return await self._registry.list_tenants()

    async def document_count(self, tenant_id: str) -> int:
        tenant_id = require_tenant_id(tenant_id)
        return await self._vector_store.count(tenant_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _index_is_ready(self) -> bool:
        description = await self._vector_store.describe_index(self._index_name)
        return description.ready
