"""
services/tenant_service.py
--------------------------
Business logic for tenants and their teams.
"""

import re
import secrets
from typing import Optional

from db import Database
from repositories.team_repo import TeamRepository
from repositories.tenant_repo import TenantRepository
from services.auth_service import AuthService
from services.results import InvalidInput, NotFound, reports_failures, success
from utils.logger import get_logger

logger = get_logger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


class TenantService:
    """Manages tenants (super admin only) and tenant-scoped teams."""

    def __init__(self, db: Database, auth: Optional[AuthService] = None):
        self.auth = auth or AuthService(db)
        self.tenants = TenantRepository(db)
        self.teams = TeamRepository(db)

    # ── TENANTS ───────────────────────────────────────────

    @reports_failures
    async def create_tenant(self, token: str, name: str) -> dict:
        """Create a tenant with generated admin credentials."""
        await self.auth.require_super(token)
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            raise InvalidInput("Tenant name is required")
        tenant = await self.tenants.create(
            name,
            admin_username=generate_username(name, suffix="admin"),
            admin_password=generate_password(),
        )
        return success(tenant=tenant.to_dict())

    @reports_failures
    async def list_tenants(self, token: str) -> dict:
        await self.auth.require_super(token)
        tenants = await self.tenants.list_all()
        return success(tenants=[t.to_dict() for t in tenants])

    @reports_failures
    async def get_tenant(self, token: str, tenant_id: str) -> dict:
        """A tenant together with the teams it owns."""
        await self.auth.require_super(token)
        tenant = await self.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFound("Tenant not found")
        teams = await self.teams.list_by_tenant(tenant_id)
        return success(tenant={**tenant.to_dict(), "teams": [t.to_dict() for t in teams]})

    @reports_failures
    async def delete_tenant(self, token: str, tenant_id: str) -> dict:
        await self.auth.require_super(token)
        await self.tenants.delete(tenant_id)
        return success()

    # ── TEAMS ─────────────────────────────────────────────

    @reports_failures
    async def list_teams(self, token: Optional[str]) -> dict:
        """All teams, or only the caller's teams for a tenant admin."""
        tenant_id = await self.auth.tenant_scope(token)
        if tenant_id:
            teams = await self.teams.list_by_tenant(tenant_id)
        else:
            teams = await self.teams.list_all()
        return success(teams=[t.to_dict() for t in teams])

    @reports_failures
    async def create_team(self, token: Optional[str], name: str) -> dict:
        """
        Create a team with generated credentials. A tenant admin's team is
        placed in their tenant; anyone else creates an unassigned team.
        """
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            raise InvalidInput("Team name is required")
        tenant_id = await self.auth.tenant_scope(token)
        team = await self.teams.create(
            name,
            username=generate_username(name),
            password=generate_password(),
            tenant_id=tenant_id,
        )
        return success(team=team.to_dict())


def generate_username(name: str, suffix: Optional[str] = None) -> str:
    """Readable login from a display name plus a random tail, e.g. 'red-team-4f1c'."""
    base = _SLUG_RE.sub("-", name.lower()).strip("-")[:24] or "team"
    parts = [base, suffix, secrets.token_hex(2)] if suffix else [base, secrets.token_hex(2)]
    return "-".join(parts)


def generate_password() -> str:
    return secrets.token_urlsafe(9)
