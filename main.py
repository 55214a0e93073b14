"""
main.py
-------
Entry point for the HackAdmin data layer.

Responsibilities:
    - Connect to PostgreSQL using the configured connection string.
    - Bring the schema up to date (safe to re-run at any time).
    - Report what each migration step did, then close the pool.

Usage:
    python main.py
"""

import asyncio
import sys

from db import Database, DataLayerError
from repositories.hackathon_repo import HackathonRepository
from utils.logger import get_logger

logger = get_logger(__name__)


async def bootstrap(db: Database) -> int:
    """Initialize the schema and log the outcome. Returns a process exit code."""

    # ── 1. Connect + migrate ──────────────────────────────
    logger.info("Initializing database...")
    try:
        await db.get_db()
        status = await HackathonRepository(db).get_status()
    except DataLayerError as e:
        logger.error(f"❌ Database initialization failed:\n{e}")
        return 1

    # ── 2. Report ─────────────────────────────────────────
    for outcome in db.bootstrapper.outcomes:
        detail = f" ({outcome.reason})" if outcome.reason else ""
        logger.info(f"  {outcome.name}: {outcome.result.value}{detail}")

    logger.info(f"Hackathon active: {status.is_active}")
    logger.info("✅ Database schema is ready.")
    return 0


def main() -> None:
    db = Database()
    try:
        code = asyncio.run(bootstrap(db))
    finally:
        db.close()
    sys.exit(code)


if __name__ == "__main__":
    main()
