"""
repositories/session_repo.py
----------------------------
Data access layer for admin sessions.
"""

from typing import Optional

from db import Database
from models.admin_session import SUPER_ADMIN, AdminSession
from utils.helpers import new_token, now_iso
from utils.logger import get_logger

logger = get_logger(__name__)


class AdminSessionRepository:
    """Repository for the admin_sessions table."""

    def __init__(self, db: Database):
        self.db = db

    async def create(self, admin_type: str = SUPER_ADMIN, tenant_id: Optional[str] = None) -> AdminSession:
        """Open a session with a fresh random token."""
        session = AdminSession(
            token=new_token(), admin_type=admin_type, tenant_id=tenant_id, created_at=now_iso(),
        )
        sql = """
            INSERT INTO admin_sessions (token, "adminType", "tenantId", "createdAt")
            VALUES (%s, %s, %s, %s);
        """
        await self.db.execute(sql, (session.token, session.admin_type, session.tenant_id, session.created_at))
        logger.info(f"Opened {admin_type} admin session" + (f" for tenant {tenant_id}" if tenant_id else ""))
        return session

    async def find(self, token: str) -> Optional[AdminSession]:
        if not token:
            return None
        result = await self.db.execute("SELECT * FROM admin_sessions WHERE token = %s;", (token,))
        if not result.rows:
            return None
        row = result.rows[0]
        return AdminSession(
            token=row["token"],
            admin_type=row.get("adminType") or SUPER_ADMIN,
            tenant_id=row.get("tenantId"),
            created_at=row["createdAt"],
        )

    async def delete(self, token: str) -> bool:
        result = await self.db.execute("DELETE FROM admin_sessions WHERE token = %s;", (token,))
        return result.row_count > 0
