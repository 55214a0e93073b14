"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env files and exposes them as typed constants.
"""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()
load_dotenv(".env.local")


# ── PostgreSQL ────────────────────────────────────────────
# Checked in order, first one found wins.
DATABASE_URL_VARS: tuple[str, ...] = ("POSTGRES_URL", "DATABASE_URL")

# Deployment platform marker; only changes error wording.
DEPLOYMENT_MARKER_VAR: str = "VERCEL"

DB_POOL_MAX: int = 10
DB_POOL_MIN: int = 2
DB_IDLE_TIMEOUT_SECONDS: float = 30.0
DB_CONNECT_TIMEOUT_SECONDS: int = 30
DB_STATEMENT_TIMEOUT_MS: int = 30_000
DB_KEEPALIVE_IDLE_SECONDS: int = 10

# Client-side race against every statement.
QUERY_TIMEOUT_SECONDS: float = 30.0


def get_database_url() -> Optional[str]:
    """Return the first configured connection string, or None."""
    for var in DATABASE_URL_VARS:
        value = os.getenv(var)
        if value:
            return value
    return None


def is_cloud_deployment() -> bool:
    """True when running on the hosting platform rather than locally."""
    return bool(os.getenv(DEPLOYMENT_MARKER_VAR))


# ── Admin sessions ────────────────────────────────────────
ADMIN_SESSION_COOKIE: str = "admin_session"
ADMIN_SESSION_MAX_AGE: int = 60 * 60 * 24 * 7

ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")

# ── Learning materials ────────────────────────────────────
MAX_MATERIAL_FILE_SIZE: int = 10 * 1024 * 1024
ALLOWED_MATERIAL_MIME_TYPES: tuple[str, ...] = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)
LEARNING_MODULES: tuple[str, ...] = ("ai", "cybersecurity")

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
