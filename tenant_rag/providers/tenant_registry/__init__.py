"""Tenant registry implementations."""

from tenant_rag.providers.tenant_registry.sqlite_tenant_registry import SQLiteTenantRegistry

__all__ = ["SQLiteTenantRegistry"]
