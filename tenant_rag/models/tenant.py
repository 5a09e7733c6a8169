"""Tenant registry record."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TenantRecord(BaseModel):
    """A registered tenant.  Its namespace in the vector index is ``tenant_id``."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str = Field(min_length=1)
    created_at: datetime
