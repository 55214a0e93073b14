"""
models/assignment.py
--------------------
Domain model binding a task to a team.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Assignment:
    """
    One task assigned to one team; unique per (team, task).

    Attributes:
        id: Primary key.
        team_id: Assigned team.
        task_id: Assigned task.
        status: Progress marker, e.g. 'assigned', 'in_progress', 'submitted'.
        last_updated: ISO-8601 timestamp of the last status change.
    """
    id: str
    team_id: str
    task_id: str
    status: str
    last_updated: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "teamId": self.team_id,
            "taskId": self.task_id,
            "status": self.status,
            "lastUpdated": self.last_updated,
        }
