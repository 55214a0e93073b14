"""
repositories/hackathon_repo.py
------------------------------
Data access layer for the hackathon status singleton and the
selection of tasks used by the current run.
"""

from typing import Optional

from db import Database
from models.hackathon import HackathonStatus
from utils.helpers import now_iso
from utils.logger import get_logger

logger = get_logger(__name__)


class HackathonRepository:
    """Repository for hackathon_status (row id 1) and hackathon_tasks."""

    def __init__(self, db: Database):
        self.db = db

    # ── STATUS ────────────────────────────────────────────

    async def get_status(self) -> HackathonStatus:
        """Return the status row; the bootstrapper seeds it, so it always exists."""
        result = await self.db.execute("SELECT * FROM hackathon_status WHERE id = 1;")
        if not result.rows:
            return HackathonStatus()
        return self._row_to_status(result.rows[0])

    async def set_status(
        self, is_active: bool, start_time: Optional[str] = None, end_time: Optional[str] = None
    ) -> HackathonStatus:
        now = now_iso()
        sql = """
            INSERT INTO hackathon_status (id, "isActive", "startTime", "endTime", "createdAt", "updatedAt")
            VALUES (1, %s, %s, %s, %s, %s)
            ON CONFLICT (id) DO UPDATE
            SET "isActive" = EXCLUDED."isActive",
                "startTime" = EXCLUDED."startTime",
                "endTime" = EXCLUDED."endTime",
                "updatedAt" = EXCLUDED."updatedAt"
            RETURNING *;
        """
        result = await self.db.execute(sql, (1 if is_active else 0, start_time, end_time, now, now))
        logger.info(f"Hackathon {'started' if is_active else 'stopped'}")
        return self._row_to_status(result.rows[0])

    # ── TASK SELECTION ────────────────────────────────────

    async def set_selected_tasks(self, task_ids: list[str]) -> None:
        """Replace the selection with exactly ``task_ids`` in one statement."""
        sql = """
            WITH removed AS (
                DELETE FROM hackathon_tasks WHERE NOT ("taskId" = ANY(%s::text[]))
            )
            INSERT INTO hackathon_tasks ("taskId", "createdAt")
            SELECT unnest(%s::text[]), %s
            ON CONFLICT ("taskId") DO NOTHING;
        """
        await self.db.execute(sql, (list(task_ids), list(task_ids), now_iso()))
        logger.info(f"Hackathon task selection set to {len(task_ids)} tasks")

    async def list_selected_task_ids(self) -> list[str]:
        result = await self.db.execute('SELECT "taskId" FROM hackathon_tasks ORDER BY "createdAt", "taskId";')
        return [r["taskId"] for r in result.rows]

    @staticmethod
    def _row_to_status(row: dict) -> HackathonStatus:
        return HackathonStatus(
            is_active=bool(row["isActive"]),
            start_time=row["startTime"],
            end_time=row["endTime"],
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )
