"""
services/hackathon_service.py
-----------------------------
Business logic for running a hackathon: the active window, which tasks
are in play, assigning tasks to teams, and the submit/review cycle.
"""

from typing import Optional

from psycopg2 import errors as pg_errors

from db import Database
from models.admin_session import AdminSession
from models.team import Team
from repositories.assignment_repo import AssignmentRepository
from repositories.hackathon_repo import HackathonRepository
from repositories.submission_repo import SubmissionRepository
from repositories.task_repo import TaskRepository
from repositories.team_repo import TeamRepository
from services.auth_service import AuthService
from services.results import Conflict, Forbidden, InvalidInput, NotFound, reports_failures, success
from utils.helpers import now_iso
from utils.logger import get_logger

logger = get_logger(__name__)

REVIEW_STATUSES = ("approved", "rejected", "pending")


class HackathonService:
    """
    Handles the hackathon lifecycle.

    Responsibilities:
        - Start/stop the hackathon and choose its tasks (super admin).
        - Assign tasks to teams (super admin, or the team's tenant admin).
        - Record team submissions and admin reviews.
    """

    def __init__(self, db: Database, auth: Optional[AuthService] = None):
        self.auth = auth or AuthService(db)
        self.status = HackathonRepository(db)
        self.tasks = TaskRepository(db)
        self.teams = TeamRepository(db)
        self.assignments = AssignmentRepository(db)
        self.submissions = SubmissionRepository(db)

    # ── STATUS ────────────────────────────────────────────

    @reports_failures
    async def get_status(self) -> dict:
        status = await self.status.get_status()
        task_ids = await self.status.list_selected_task_ids()
        return success(status=status.to_dict(), taskIds=task_ids)

    @reports_failures
    async def start(self, token: str, end_time: Optional[str] = None) -> dict:
        await self.auth.require_super(token)
        status = await self.status.set_status(True, start_time=now_iso(), end_time=end_time)
        return success(status=status.to_dict())

    @reports_failures
    async def stop(self, token: str) -> dict:
        await self.auth.require_super(token)
        current = await self.status.get_status()
        status = await self.status.set_status(False, start_time=current.start_time, end_time=now_iso())
        return success(status=status.to_dict())

    @reports_failures
    async def select_tasks(self, token: str, task_ids: list[str]) -> dict:
        await self.auth.require_super(token)
        unique_ids = list(dict.fromkeys(task_ids or []))
        try:
            await self.status.set_selected_tasks(unique_ids)
        except pg_errors.ForeignKeyViolation:
            raise InvalidInput("One or more selected tasks do not exist")
        return success(taskIds=unique_ids)

    # ── ASSIGNMENTS ───────────────────────────────────────

    @reports_failures
    async def assign_task(self, token: str, team_id: str, task_id: str) -> dict:
        session = await self.auth.require_session(token)
        team = await self._team_in_scope(session, team_id)
        if await self.tasks.get_by_id(task_id) is None:
            raise NotFound("Task not found")
        try:
            assignment = await self.assignments.assign(team.id, task_id)
        except pg_errors.UniqueViolation:
            raise Conflict("Task is already assigned to this team")
        return success(assignment=assignment.to_dict())

    # ── SUBMISSIONS ───────────────────────────────────────

    @reports_failures
    async def submit(
        self, team_id: str, assignment_id: str, plan: str, findings: str, flag: str
    ) -> dict:
        """
        Record a team's answer. Team authentication happens upstream; this
        only checks that the assignment belongs to the team.
        """
        assignment = await self.assignments.get_by_id(assignment_id)
        if assignment is None or assignment.team_id != team_id:
            raise NotFound("Assignment not found")
        if not (plan or "").strip() or not (flag or "").strip():
            raise InvalidInput("Plan and flag are required")
        try:
            submission = await self.submissions.submit(
                assignment_id, team_id, plan.strip(), (findings or "").strip(), flag.strip()
            )
        except pg_errors.UniqueViolation:
            raise Conflict("This assignment has already been submitted")
        await self.assignments.update_status(assignment_id, "submitted")
        return success(submission=submission.to_dict())

    @reports_failures
    async def review_submission(
        self,
        token: str,
        submission_id: str,
        status: str,
        points_awarded: int = 0,
        admin_notes: str = "",
    ) -> dict:
        session = await self.auth.require_session(token)
        if status not in REVIEW_STATUSES:
            raise InvalidInput(f"Invalid status. Must be one of: {', '.join(REVIEW_STATUSES)}")
        points_awarded = _parse_points(points_awarded)
        existing = await self.submissions.get_by_id(submission_id)
        if existing is None:
            raise NotFound("Submission not found")
        await self._team_in_scope(session, existing.team_id)
        submission = await self.submissions.review(submission_id, status, points_awarded, admin_notes or "")
        if submission is None:
            raise NotFound("Submission not found")
        await self.assignments.update_status(submission.assignment_id, "reviewed")
        return success(submission=submission.to_dict())

    @reports_failures
    async def list_pending_submissions(self, token: str) -> dict:
        await self.auth.require_super(token)
        pending = await self.submissions.list_by_status("pending")
        return success(submissions=[s.to_dict() for s in pending])

    # ── HELPERS ───────────────────────────────────────────

    async def _team_in_scope(self, session: AdminSession, team_id: str) -> Team:
        team = await self.teams.get_by_id(team_id)
        if team is None:
            raise NotFound("Team not found")
        if not session.is_super() and team.tenant_id != session.tenant_id:
            raise Forbidden("Team belongs to another tenant")
        return team


def _parse_points(value) -> int:
    """Points from a form or JSON body; must be a non-negative whole number."""
    if isinstance(value, bool):
        raise InvalidInput("Points awarded must be a whole number")
    try:
        points = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("Points awarded must be a whole number")
    if isinstance(value, float) and value != points:
        raise InvalidInput("Points awarded must be a whole number")
    if points < 0:
        raise InvalidInput("Points awarded cannot be negative")
    return points
