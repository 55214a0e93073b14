"""
repositories/assignment_repo.py
-------------------------------
Data access layer for task assignments.
All SQL queries related to the `assignments` table live here.
"""

from typing import Optional

from db import Database
from models.assignment import Assignment
from utils.helpers import new_id, now_iso
from utils.logger import get_logger

logger = get_logger(__name__)


class AssignmentRepository:
    """Repository for CRUD operations on the assignments table."""

    def __init__(self, db: Database):
        self.db = db

    # ── CREATE ────────────────────────────────────────────

    async def assign(self, team_id: str, task_id: str, status: str = "assigned") -> Assignment:
        """
        Assign a task to a team.

        Raises:
            psycopg2.errors.UniqueViolation: If the team already has this task.
            psycopg2.errors.ForeignKeyViolation: If the team or task is unknown.
        """
        assignment = Assignment(
            id=new_id(), team_id=team_id, task_id=task_id, status=status, last_updated=now_iso(),
        )
        sql = """
            INSERT INTO assignments (id, "teamId", "taskId", status, "lastUpdated")
            VALUES (%s, %s, %s, %s, %s);
        """
        try:
            await self.db.execute(sql, (
                assignment.id, assignment.team_id, assignment.task_id,
                assignment.status, assignment.last_updated,
            ))
        except Exception as e:
            logger.error(f"Failed to assign task {task_id} to team {team_id}: {e}")
            raise
        logger.info(f"Assigned task {task_id} to team {team_id}")
        return assignment

    # ── READ ──────────────────────────────────────────────

    async def get_by_id(self, assignment_id: str) -> Optional[Assignment]:
        result = await self.db.execute("SELECT * FROM assignments WHERE id = %s;", (assignment_id,))
        return self._row_to_assignment(result.rows[0]) if result.rows else None

    async def list_for_team(self, team_id: str) -> list[Assignment]:
        sql = 'SELECT * FROM assignments WHERE "teamId" = %s ORDER BY "lastUpdated" DESC;'
        result = await self.db.execute(sql, (team_id,))
        return [self._row_to_assignment(r) for r in result.rows]

    # ── UPDATE ────────────────────────────────────────────

    async def update_status(self, assignment_id: str, status: str) -> bool:
        """
        Change an assignment's status and bump its timestamp.

        Returns:
            True if a row was updated, False otherwise.
        """
        sql = 'UPDATE assignments SET status = %s, "lastUpdated" = %s WHERE id = %s;'
        result = await self.db.execute(sql, (status, now_iso(), assignment_id))
        return result.row_count > 0

    # ── DELETE ────────────────────────────────────────────

    async def delete(self, assignment_id: str) -> bool:
        result = await self.db.execute("DELETE FROM assignments WHERE id = %s;", (assignment_id,))
        return result.row_count > 0

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_assignment(row: dict) -> Assignment:
        return Assignment(
            id=row["id"],
            team_id=row["teamId"],
            task_id=row["taskId"],
            status=row["status"],
            last_updated=row["lastUpdated"],
        )
