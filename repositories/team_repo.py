"""
repositories/team_repo.py
-------------------------
Data access layer for teams.
All SQL queries related to the `teams` table live here.
"""

from typing import Optional

from db import Database
from models.team import Team
from utils.helpers import new_id, now_iso
from utils.logger import get_logger

logger = get_logger(__name__)


class TeamRepository:
    """Repository for CRUD operations on the teams table."""

    def __init__(self, db: Database):
        self.db = db

    # ── CREATE ────────────────────────────────────────────

    async def create(
        self, name: str, username: str, password: str, tenant_id: Optional[str] = None
    ) -> Team:
        """
        Insert a new team, optionally owned by a tenant.

        Raises:
            psycopg2.errors.UniqueViolation: If the username is taken.
            psycopg2.errors.ForeignKeyViolation: If the tenant does not exist.
        """
        team = Team(
            id=new_id(),
            name=name,
            username=username,
            password=password,
            tenant_id=tenant_id,
            created_at=now_iso(),
        )
        sql = """
            INSERT INTO teams (id, name, username, password, "tenantId", "createdAt")
            VALUES (%s, %s, %s, %s, %s, %s);
        """
        try:
            await self.db.execute(sql, (
                team.id, team.name, team.username, team.password, team.tenant_id, team.created_at,
            ))
        except Exception as e:
            logger.error(f"Failed to create team '{name}': {e}")
            raise
        logger.info(f"Created team {team.id} ({team.name}) for tenant {tenant_id}")
        return team

    # ── READ ──────────────────────────────────────────────

    async def get_by_id(self, team_id: str) -> Optional[Team]:
        result = await self.db.execute("SELECT * FROM teams WHERE id = %s;", (team_id,))
        return self._row_to_team(result.rows[0]) if result.rows else None

    async def find_by_credentials(self, username: str, password: str) -> Optional[Team]:
        sql = "SELECT * FROM teams WHERE username = %s AND password = %s;"
        result = await self.db.execute(sql, (username, password))
        return self._row_to_team(result.rows[0]) if result.rows else None

    async def list_all(self) -> list[Team]:
        result = await self.db.execute('SELECT * FROM teams ORDER BY "createdAt" DESC;')
        return [self._row_to_team(r) for r in result.rows]

    async def list_by_tenant(self, tenant_id: str) -> list[Team]:
        sql = 'SELECT * FROM teams WHERE "tenantId" = %s ORDER BY "createdAt" DESC;'
        result = await self.db.execute(sql, (tenant_id,))
        return [self._row_to_team(r) for r in result.rows]

    # ── DELETE ────────────────────────────────────────────

    async def delete(self, team_id: str) -> bool:
        """Delete a team together with its assignments and submissions."""
        result = await self.db.execute("DELETE FROM teams WHERE id = %s;", (team_id,))
        deleted = result.row_count > 0
        if deleted:
            logger.info(f"Deleted team {team_id}")
        return deleted

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_team(row: dict) -> Team:
        return Team(
            id=row["id"],
            name=row["name"],
            username=row["username"],
            password=row["password"],
            tenant_id=row.get("tenantId"),
            created_at=row["createdAt"],
        )
