"""
models/hackathon.py
-------------------
Domain model for the singleton hackathon status row.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class HackathonStatus:
    is_active: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "isActive": self.is_active,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
