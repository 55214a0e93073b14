"""
models/team.py
--------------
Domain model for competing teams.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Team:
    """
    A competing unit. Teams without a tenant belong to no organization.

    Attributes:
        id: Primary key.
        name: Display name.
        username: Team login, unique across all teams.
        password: Team password.
        tenant_id: Owning tenant, or None for unassigned teams.
        created_at: ISO-8601 creation timestamp.
    """
    id: str
    name: str
    username: str
    password: str
    tenant_id: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "password": self.password,
            "tenantId": self.tenant_id,
            "createdAt": self.created_at,
        }
