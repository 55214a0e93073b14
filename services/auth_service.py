"""
services/auth_service.py
------------------------
Admin login, logout and session checks.

Sessions are opaque random tokens stored in `admin_sessions`; the caller
puts the token in the ``ADMIN_SESSION_COOKIE`` cookie with
``ADMIN_SESSION_MAX_AGE``. There is no server-side expiry.
"""

import secrets
from typing import Optional

from config import ADMIN_PASSWORD, ADMIN_SESSION_COOKIE, ADMIN_SESSION_MAX_AGE, ADMIN_USERNAME
from db import Database
from models.admin_session import SUPER_ADMIN, TENANT_ADMIN, AdminSession
from repositories.session_repo import AdminSessionRepository
from repositories.tenant_repo import TenantRepository
from services.results import Forbidden, InvalidInput, Unauthorized, reports_failures, success
from utils.logger import get_logger

logger = get_logger(__name__)


class AuthService:
    """
    Handles both admin tiers.

    Responsibilities:
        - Log super admins in against the configured credentials.
        - Log tenant admins in against the tenants table.
        - Resolve cookie tokens to sessions and enforce the tier a call needs.
    """

    def __init__(self, db: Database):
        self.sessions = AdminSessionRepository(db)
        self.tenants = TenantRepository(db)

    # ── LOGIN / LOGOUT ────────────────────────────────────

    @reports_failures
    async def login_super_admin(self, username: str, password: str) -> dict:
        _require_credentials(username, password)
        if not ADMIN_PASSWORD or not (
            secrets.compare_digest(username, ADMIN_USERNAME)
            and secrets.compare_digest(password, ADMIN_PASSWORD)
        ):
            logger.warning(f"🚫 Failed super admin login for '{username}'")
            raise Unauthorized("Invalid admin credentials")
        session = await self.sessions.create(SUPER_ADMIN)
        return success(authenticated=True, **_cookie(session))

    @reports_failures
    async def login_tenant_admin(self, username: str, password: str) -> dict:
        _require_credentials(username, password)
        tenant = await self.tenants.find_by_admin_credentials(username, password)
        if tenant is None:
            logger.warning(f"🚫 Failed tenant admin login for '{username}'")
            raise Unauthorized("Invalid tenant admin credentials")
        session = await self.sessions.create(TENANT_ADMIN, tenant.id)
        return success(authenticated=True, tenantId=tenant.id, **_cookie(session))

    @reports_failures
    async def logout(self, token: str) -> dict:
        if token:
            await self.sessions.delete(token)
        return success()

    # ── SESSION CHECKS ────────────────────────────────────

    async def get_session(self, token: Optional[str]) -> Optional[AdminSession]:
        """Session for a cookie token, or None for a missing/unknown token."""
        if not token:
            return None
        return await self.sessions.find(token)

    async def require_session(self, token: Optional[str]) -> AdminSession:
        session = await self.get_session(token)
        if session is None:
            raise Unauthorized("Unauthorized")
        return session

    async def require_super(self, token: Optional[str]) -> AdminSession:
        """
        Raises:
            Unauthorized: No token was supplied.
            Forbidden: The token is unknown or belongs to a tenant admin.
        """
        if not token:
            raise Unauthorized("Unauthorized")
        session = await self.sessions.find(token)
        if session is None or not session.is_super():
            raise Forbidden("Unauthorized - Super admin access required")
        return session

    async def tenant_scope(self, token: Optional[str]) -> Optional[str]:
        """Tenant id a tenant-admin token is limited to; None means unscoped."""
        session = await self.get_session(token)
        if session is not None and session.is_tenant():
            return session.tenant_id
        return None


def _require_credentials(username: str, password: str) -> None:
    if not username or not password:
        raise InvalidInput("Username and password are required")


def _cookie(session: AdminSession) -> dict:
    return {
        "cookie": ADMIN_SESSION_COOKIE,
        "token": session.token,
        "maxAge": ADMIN_SESSION_MAX_AGE,
    }
