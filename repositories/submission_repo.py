"""
repositories/submission_repo.py
-------------------------------
Data access layer for submissions.
All SQL queries related to the `submissions` table live here.
"""

from typing import Optional

from db import Database
from models.submission import Submission
from utils.helpers import new_id, now_iso
from utils.logger import get_logger

logger = get_logger(__name__)


class SubmissionRepository:
    """Repository for CRUD operations on the submissions table."""

    def __init__(self, db: Database):
        self.db = db

    # ── CREATE ────────────────────────────────────────────

    async def submit(
        self, assignment_id: str, team_id: str, plan: str, findings: str, flag: str
    ) -> Submission:
        """
        Record a team's first answer to an assignment.

        Raises:
            psycopg2.errors.UniqueViolation: If the assignment already has a submission.
        """
        now = now_iso()
        submission = Submission(
            id=new_id(),
            assignment_id=assignment_id,
            team_id=team_id,
            plan=plan,
            findings=findings,
            flag=flag,
            created_at=now,
            updated_at=now,
        )
        sql = """
            INSERT INTO submissions (id, "assignmentId", "teamId", plan, findings, flag, "createdAt", "updatedAt")
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *;
        """
        try:
            result = await self.db.execute(sql, (
                submission.id, submission.assignment_id, submission.team_id,
                submission.plan, submission.findings, submission.flag,
                submission.created_at, submission.updated_at,
            ))
        except Exception as e:
            logger.error(f"Failed to record submission for assignment {assignment_id}: {e}")
            raise
        logger.info(f"Team {team_id} submitted assignment {assignment_id}")
        return self._row_to_submission(result.rows[0])

    # ── READ ──────────────────────────────────────────────

    async def get_by_id(self, submission_id: str) -> Optional[Submission]:
        result = await self.db.execute("SELECT * FROM submissions WHERE id = %s;", (submission_id,))
        return self._row_to_submission(result.rows[0]) if result.rows else None

    async def get_by_assignment(self, assignment_id: str) -> Optional[Submission]:
        sql = 'SELECT * FROM submissions WHERE "assignmentId" = %s;'
        result = await self.db.execute(sql, (assignment_id,))
        return self._row_to_submission(result.rows[0]) if result.rows else None

    async def list_for_team(self, team_id: str) -> list[Submission]:
        sql = 'SELECT * FROM submissions WHERE "teamId" = %s ORDER BY "createdAt" DESC;'
        result = await self.db.execute(sql, (team_id,))
        return [self._row_to_submission(r) for r in result.rows]

    async def list_by_status(self, status: str = "pending") -> list[Submission]:
        """Submissions in a given review state, oldest first (review queue order)."""
        sql = 'SELECT * FROM submissions WHERE status = %s ORDER BY "createdAt" ASC;'
        result = await self.db.execute(sql, (status,))
        return [self._row_to_submission(r) for r in result.rows]

    # ── UPDATE ────────────────────────────────────────────

    async def review(
        self, submission_id: str, status: str, points_awarded: int, admin_notes: str = ""
    ) -> Optional[Submission]:
        """
        Store an admin's review.

        Returns:
            The updated Submission, or None if it does not exist.
        """
        now = now_iso()
        sql = """
            UPDATE submissions
            SET status = %s, "pointsAwarded" = %s, "adminNotes" = %s, "reviewedAt" = %s, "updatedAt" = %s
            WHERE id = %s
            RETURNING *;
        """
        result = await self.db.execute(sql, (status, points_awarded, admin_notes, now, now, submission_id))
        if not result.rows:
            return None
        logger.info(f"Reviewed submission {submission_id}: {status} ({points_awarded} pts)")
        return self._row_to_submission(result.rows[0])

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_submission(row: dict) -> Submission:
        return Submission(
            id=row["id"],
            assignment_id=row["assignmentId"],
            team_id=row["teamId"],
            plan=row["plan"],
            findings=row["findings"],
            flag=row["flag"],
            status=row["status"] or "pending",
            points_awarded=row["pointsAwarded"] or 0,
            admin_notes=row["adminNotes"] or "",
            reviewed_at=row["reviewedAt"],
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )
