"""
models/tenant.py
----------------
Domain model for tenants (schools and organizations).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Tenant:
    """
    An organization-level account that scopes teams and owns one
    tenant-admin login.

    Attributes:
        id: Primary key.
        name: Display name (e.g., 'Acme High School').
        admin_username: Tenant admin login, unique across all tenants.
        admin_password: Tenant admin password.
        created_at: ISO-8601 creation timestamp.
        updated_at: ISO-8601 last-update timestamp.
    """
    id: str
    name: str
    admin_username: str
    admin_password: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "adminUsername": self.admin_username,
            "adminPassword": self.admin_password,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
