"""Input checks shared by the pipeline services."""

from __future__ import annotations

from typing import Any

from tenant_rag.utils.errors import ValidationError


def require_tenant_id(tenant_id: Any) -> str:
    """Return *tenant_id* stripped, or raise ValidationError if it is missing."""
    if not isinstance(tenant_id, str) or not tenant_id.strip():
        raise ValidationError(message="Tenant ID is required", stage="validate")
    return tenant_id.strip()


def require_text(value: Any, field: str, tenant_id: str | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message=f"{field} is required", tenant_id=tenant_id, stage="validate")
    return value
