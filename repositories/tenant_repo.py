"""
repositories/tenant_repo.py
---------------------------
Data access layer for tenants.
All SQL queries related to the `tenants` table live here.
"""

from typing import Optional

from db import Database
from models.tenant import Tenant
from utils.helpers import new_id, now_iso
from utils.logger import get_logger

logger = get_logger(__name__)


class TenantRepository:
    """Repository for CRUD operations on the tenants table."""

    def __init__(self, db: Database):
        self.db = db

    # ── CREATE ────────────────────────────────────────────

    async def create(self, name: str, admin_username: str, admin_password: str) -> Tenant:
        """
        Insert a new tenant.

        Raises:
            psycopg2.errors.UniqueViolation: If the admin username is taken.
        """
        now = now_iso()
        tenant = Tenant(
            id=new_id(),
            name=name,
            admin_username=admin_username,
            admin_password=admin_password,
            created_at=now,
            updated_at=now,
        )
        sql = """
            INSERT INTO tenants (id, name, "adminUsername", "adminPassword", "createdAt", "updatedAt")
            VALUES (%s, %s, %s, %s, %s, %s);
        """
        try:
            await self.db.execute(sql, (
                tenant.id, tenant.name, tenant.admin_username,
                tenant.admin_password, tenant.created_at, tenant.updated_at,
            ))
        except Exception as e:
            logger.error(f"Failed to create tenant '{name}': {e}")
            raise
        logger.info(f"Created tenant {tenant.id} ({tenant.name})")
        return tenant

    # ── READ ──────────────────────────────────────────────

    async def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        result = await self.db.execute("SELECT * FROM tenants WHERE id = %s;", (tenant_id,))
        return self._row_to_tenant(result.rows[0]) if result.rows else None

    async def find_by_admin_credentials(self, username: str, password: str) -> Optional[Tenant]:
        """Look up the tenant whose admin login matches both fields."""
        sql = 'SELECT * FROM tenants WHERE "adminUsername" = %s AND "adminPassword" = %s;'
        result = await self.db.execute(sql, (username, password))
        return self._row_to_tenant(result.rows[0]) if result.rows else None

    async def list_all(self) -> list[Tenant]:
        """All tenants, newest first."""
        result = await self.db.execute('SELECT * FROM tenants ORDER BY "createdAt" DESC;')
        return [self._row_to_tenant(r) for r in result.rows]

    # ── DELETE ────────────────────────────────────────────

    async def delete(self, tenant_id: str) -> bool:
        """
        Delete a tenant. Its teams, their assignments and submissions, and
        its admin sessions go with it through ON DELETE CASCADE.

        Returns:
            True if a row was deleted, False otherwise.
        """
        result = await self.db.execute("DELETE FROM tenants WHERE id = %s;", (tenant_id,))
        deleted = result.row_count > 0
        if deleted:
            logger.info(f"Deleted tenant {tenant_id}")
        return deleted

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_tenant(row: dict) -> Tenant:
        return Tenant(
            id=row["id"],
            name=row["name"],
            admin_username=row["adminUsername"],
            admin_password=row["adminPassword"],
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )
