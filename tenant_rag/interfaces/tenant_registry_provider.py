"""Abstract base class for the tenant registry.

The vector index has no notion of a tenant beyond its namespace, which
exists only while it holds records.  The registry gives tenants an
existence of their own so that "delete tenant" (forget the tenant) and
"clear documents" (empty the namespace) are different operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tenant_rag.models.tenant import TenantRecord


# Concrete implementations (tenant_rag/providers/tenant_registry/):
#   SQLiteTenantRegistry -- aiosqlite, one row per tenant
class ITenantRegistry(ABC):
    """Contract for persisting registered tenants."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create storage (tables, files) if needed.  Safe to call repeatedly."""

    @abstractmethod
    async def register(self, tenant_id: str) -> TenantRecord:
        """Register *tenant_id*; return the existing record if already present."""

    @abstractmethod
    async def get(self, tenant_id: str) -> TenantRecord | None:
        """Return the record for *tenant_id*, or ``None``."""

    @abstractmethod
    async def list_tenants(self) -> list[TenantRecord]:
        """Return all registered tenants, oldest first."""

    @abstractmethod
    async def remove(self, tenant_id: str) -> bool:
        """Forget *tenant_id*; return ``True`` if a record was removed."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"sqlite"``."""
