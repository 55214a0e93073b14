import os
import sys
from pathlib import Path

import psycopg2
import pytest

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from db.database import Database  # noqa: E402
from tests.fakes import FakeConnector, FakePool, make_database  # noqa: E402


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep a developer's .env.local from leaking into unit tests."""
    for var in ("POSTGRES_URL", "DATABASE_URL", "VERCEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def fake_db(fake_pool):
    return make_database(fake_pool)


@pytest.fixture
def connector(monkeypatch):
    fake = FakeConnector()
    monkeypatch.setattr(psycopg2, "connect", fake)
    return fake


# ── Live PostgreSQL ───────────────────────────────────────

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")

_TABLES = (
    "submissions", "assignments", "hackathon_tasks", "hackathon_status",
    "learning_materials", "admin_sessions", "teams", "tasks", "tenants",
)


def drop_all_tables(dsn: str) -> None:
    conn = psycopg2.connect(dsn)
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            for table in _TABLES:
                cur.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
    finally:
        conn.close()


@pytest.fixture
def live_dsn():
    if not TEST_DATABASE_URL:
        pytest.skip("TEST_DATABASE_URL not set")
    drop_all_tables(TEST_DATABASE_URL)
    return TEST_DATABASE_URL


@pytest.fixture
def live_db(live_dsn):
    db = Database(dsn=live_dsn)
    yield db
    db.close()
