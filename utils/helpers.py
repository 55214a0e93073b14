"""
utils/helpers.py
----------------
Small helpers for row identifiers, session tokens and timestamps.
"""

import secrets
import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Random primary key for a new row."""
    return str(uuid.uuid4())


def new_token() -> str:
    """Opaque bearer token for an admin session cookie."""
    return secrets.token_hex(32)


def now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a trailing Z."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")
