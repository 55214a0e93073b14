"""
models/submission.py
--------------------
Domain model for a team's answer to an assigned task.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Submission:
    """
    A team's answer to one assignment, reviewed by an admin.

    Attributes:
        id: Primary key.
        assignment_id: The answered assignment (one submission each).
        team_id: Submitting team.
        plan: The team's plan of attack.
        findings: What the team found.
        flag: The captured flag.
        status: 'pending' until reviewed, then e.g. 'approved' / 'rejected'.
        points_awarded: Points granted on review.
        admin_notes: Reviewer comments.
        reviewed_at: ISO-8601 review timestamp, None while pending.
    """
    id: str
    assignment_id: str
    team_id: str
    plan: str
    findings: str
    flag: str
    status: str = "pending"
    points_awarded: int = 0
    admin_notes: str = ""
    reviewed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def is_reviewed(self) -> bool:
        return self.reviewed_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assignmentId": self.assignment_id,
            "teamId": self.team_id,
            "plan": self.plan,
            "findings": self.findings,
            "flag": self.flag,
            "status": self.status,
            "pointsAwarded": self.points_awarded,
            "adminNotes": self.admin_notes,
            "reviewedAt": self.reviewed_at,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
