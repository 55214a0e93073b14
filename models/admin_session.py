"""
models/admin_session.py
-----------------------
Domain model for cookie-backed admin sessions.
"""

from dataclasses import dataclass
from typing import Optional

SUPER_ADMIN = "super"
TENANT_ADMIN = "tenant"


@dataclass
class AdminSession:
    """
    An opaque bearer token mapped to a privilege tier.

    Attributes:
        token: The cookie value; primary key.
        admin_type: 'super' or 'tenant'.
        tenant_id: Scoping tenant for tenant admins, None for super admins.
        created_at: ISO-8601 login timestamp.
    """
    token: str
    admin_type: str = SUPER_ADMIN
    tenant_id: Optional[str] = None
    created_at: Optional[str] = None

    def is_super(self) -> bool:
        return self.admin_type == SUPER_ADMIN

    def is_tenant(self) -> bool:
        return self.admin_type == TENANT_ADMIN and self.tenant_id is not None
