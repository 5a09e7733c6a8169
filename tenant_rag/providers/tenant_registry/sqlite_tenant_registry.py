"""SQLite-backed tenant registry.

Keeps one row per registered tenant in ``data/tenants.db`` using
``aiosqlite`` for async I/O.  Registration is idempotent: registering an
existing tenant returns its original record untouched.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import structlog

from tenant_rag.interfaces.tenant_registry_provider import ITenantRegistry
from tenant_rag.models.tenant import TenantRecord

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/tenants.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS tenants (
    tenant_id   TEXT PRIMARY KEY,
    created_at  TEXT NOT NULL
);
"""

_INSERT_SQL = "INSERT OR IGNORE INTO tenants (tenant_id, created_at) VALUES (?, ?);"

_SELECT_ONE_SQL = "SELECT tenant_id, created_at FROM tenants WHERE tenant_id = ?;"

_SELECT_ALL_SQL = "SELECT tenant_id, created_at FROM tenants ORDER BY created_at, tenant_id;"

_DELETE_SQL = "DELETE FROM tenants WHERE tenant_id = ?;"


def _row_to_record(row: aiosqlite.Row) -> TenantRecord:
    return TenantRecord(tenant_id=row["tenant_id"], created_at=datetime.fromisoformat(row["created_at"]))


class SQLiteTenantRegistry(ITenantRegistry):
    """SQLite-backed tenant registry."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the tenants table if it doesn't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            await db.commit()
        logger.info("tenant_registry_initialized", path=str(self._db_path))

    async def register(self, tenant_id: str) -> TenantRecord:
        created_at = datetime.now(timezone.utc).isoformat()
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_INSERT_SQL, (tenant_id, created_at))
            inserted = cursor.rowcount > 0
            await db.commit()
            cursor = await db.execute(_SELECT_ONE_SQL, (tenant_id,))
            row = await cursor.fetchone()

        if inserted:
            logger.info("tenant_registered", tenant_id=tenant_id)
        return _row_to_record(row)

    async def get(self, tenant_id: str) -> TenantRecord | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_ONE_SQL, (tenant_id,))
            row = await cursor.fetchone()
        return _row_to_record(row) if row is not None else None

    async def list_tenants(self) -> list[TenantRecord]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_ALL_SQL)
            rows = await cursor.fetchall()
        return [_row_to_record(r) for r in rows]

    async def remove(self, tenant_id: str) -> bool:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_DELETE_SQL, (tenant_id,))
            removed = cursor.rowcount > 0
            await db.commit()
        if removed:
            logger.info("tenant_removed", tenant_id=tenant_id)
        return removed

    def get_provider_name(self) -> str:
        return "sqlite"
