"""
End-to-end checks against a real PostgreSQL server: tenant cascade,
uniqueness constraints, the Acme/Red/Recon scenario, idempotent re-runs
and concurrent bootstraps.

Skipped unless TEST_DATABASE_URL points at a disposable database; every
test starts by dropping the application tables. To run them:

    docker run -d --name hackadmin-pg -e POSTGRES_PASSWORD=pw -p 5432:5432 postgres:16
    export TEST_DATABASE_URL=postgresql://postgres:pw@localhost:5432/postgres
    pytest tests/test_integration.py
"""

import asyncio

import psycopg2
import pytest
from psycopg2 import errors as pg_errors

from db import Database
from db.init_db import StepResult
from models.admin_session import TENANT_ADMIN
from repositories.assignment_repo import AssignmentRepository
from repositories.hackathon_repo import HackathonRepository
from repositories.session_repo import AdminSessionRepository
from repositories.submission_repo import SubmissionRepository
from repositories.task_repo import TaskRepository
from repositories.team_repo import TeamRepository
from repositories.tenant_repo import TenantRepository


async def _count(db, table):
    result = await db.execute(f"SELECT COUNT(*) AS n FROM {table};")
    return result.rows[0]["n"]


async def _seed_acme(db):
    """Tenant Acme with team Red assigned task Recon and a pending submission."""
    tenant = await TenantRepository(db).create("Acme", "acme-admin", "pw")
    team = await TeamRepository(db).create("Red", "red", "pw", tenant_id=tenant.id)
    task = await TaskRepository(db).create("Recon", "osint", "easy", "Find it", "FLAG{x}", 100, task_id="recon")
    assignment = await AssignmentRepository(db).assign(team.id, task.id)
    submission = await SubmissionRepository(db).submit(assignment.id, team.id, "plan", "", "FLAG{x}")
    return tenant, team, task, assignment, submission


class TestSchema:

    @pytest.mark.asyncio
    async def test_fresh_database(self, live_db):
        await live_db.get_db()

        status = await HackathonRepository(live_db).get_status()
        assert status.is_active is False
        assert await _count(live_db, "hackathon_status") == 1
        assert all(o.result is not StepResult.FAILED for o in live_db.bootstrapper.outcomes)

    @pytest.mark.asyncio
    async def test_rerun_in_new_process_is_noop(self, live_dsn):
        first = Database(dsn=live_dsn)
        await first.get_db()
        first.close()

        second = Database(dsn=live_dsn)
        try:
            await second.get_db()
            outcomes = {o.name: o.result for o in second.bootstrapper.outcomes}
        finally:
            second.close()

        assert outcomes["create table tenants"] is StepResult.ALREADY_PRESENT
        assert outcomes["add constraint teams_tenantId_fkey"] is StepResult.ALREADY_PRESENT
        assert outcomes["seed hackathon_status"] is StepResult.ALREADY_PRESENT

    @pytest.mark.asyncio
    async def test_concurrent_first_calls(self, live_db):
        runners = await asyncio.gather(*(live_db.get_db() for _ in range(10)))

        assert all(r is live_db.runner for r in runners)
        assert live_db.bootstrapper.runs == 1

    @pytest.mark.asyncio
    async def test_two_processes_bootstrap_at_once(self, live_dsn):
        dbs = [Database(dsn=live_dsn) for _ in range(3)]
        try:
            await asyncio.gather(*(db.get_db() for db in dbs))
            assert all(db.is_ready for db in dbs)
        finally:
            for db in dbs:
                db.close()

    @pytest.mark.asyncio
    async def test_upgrades_pre_tenant_schema(self, live_dsn):
        conn = psycopg2.connect(live_dsn)
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE teams (
                    id TEXT PRIMARY KEY, name TEXT NOT NULL, username TEXT NOT NULL UNIQUE,
                    password TEXT NOT NULL, "createdAt" TEXT NOT NULL
                )
            """)
            cur.execute("""INSERT INTO teams VALUES ('old', 'Old', 'old', 'pw', '2024-01-01T00:00:00.000Z')""")
            cur.execute('CREATE TABLE admin_sessions (token TEXT PRIMARY KEY, "createdAt" TEXT NOT NULL)')
            cur.execute("""INSERT INTO admin_sessions VALUES ('legacy', '2024-01-01T00:00:00.000Z')""")
        conn.close()

        db = Database(dsn=live_dsn)
        try:
            await db.get_db()
            team = await TeamRepository(db).get_by_id("old")
            session = await AdminSessionRepository(db).find("legacy")
        finally:
            db.close()

        assert team.tenant_id is None
        assert session.is_super()


class TestTenantCascade:

    @pytest.mark.asyncio
    async def test_deleting_tenant_removes_everything_below(self, live_db):
        tenant, team, task, _, _ = await _seed_acme(live_db)
        await AdminSessionRepository(live_db).create(TENANT_ADMIN, tenant.id)

        assert await TenantRepository(live_db).delete(tenant.id)

        assert await TeamRepository(live_db).get_by_id(team.id) is None
        assert await _count(live_db, "assignments") == 0
        assert await _count(live_db, "submissions") == 0
        assert await _count(live_db, "admin_sessions") == 0
        assert await TaskRepository(live_db).get_by_id(task.id) is not None

    @pytest.mark.asyncio
    async def test_other_tenants_untouched(self, live_db):
        acme, _, task, _, _ = await _seed_acme(live_db)
        globex = await TenantRepository(live_db).create("Globex", "globex-admin", "pw")
        blue = await TeamRepository(live_db).create("Blue", "blue", "pw", tenant_id=globex.id)
        await AssignmentRepository(live_db).assign(blue.id, task.id)

        await TenantRepository(live_db).delete(acme.id)

        assert [t.id for t in await TeamRepository(live_db).list_all()] == [blue.id]
        assert len(await AssignmentRepository(live_db).list_for_team(blue.id)) == 1


class TestConstraints:

    @pytest.mark.asyncio
    async def test_duplicate_team_username(self, live_db):
        await TeamRepository(live_db).create("Red", "red", "pw")

        with pytest.raises(pg_errors.UniqueViolation):
            await TeamRepository(live_db).create("Red again", "red", "pw")

    @pytest.mark.asyncio
    async def test_duplicate_assignment(self, live_db):
        _, team, task, _, _ = await _seed_acme(live_db)

        with pytest.raises(pg_errors.UniqueViolation):
            await AssignmentRepository(live_db).assign(team.id, task.id)

    @pytest.mark.asyncio
    async def test_second_submission_for_assignment(self, live_db):
        _, team, _, assignment, _ = await _seed_acme(live_db)

        with pytest.raises(pg_errors.UniqueViolation):
            await SubmissionRepository(live_db).submit(assignment.id, team.id, "again", "", "FLAG{y}")

    @pytest.mark.asyncio
    async def test_status_row_is_singleton(self, live_db):
        await live_db.get_db()

        with pytest.raises(pg_errors.CheckViolation):
            await live_db.execute(
                """INSERT INTO hackathon_status (id, "createdAt", "updatedAt") VALUES (2, 'x', 'x')"""
            )


class TestHackathonRepository:

    @pytest.mark.asyncio
    async def test_task_selection_replaced(self, live_db):
        tasks = TaskRepository(live_db)
        for task_id in ("a", "b", "c"):
            await tasks.create(task_id, "web", "easy", "-", "FLAG", 10, task_id=task_id)
        repo = HackathonRepository(live_db)

        await repo.set_selected_tasks(["a", "b"])
        await repo.set_selected_tasks(["b", "c"])

        assert sorted(await repo.list_selected_task_ids()) == ["b", "c"]

    @pytest.mark.asyncio
    async def test_start_and_stop(self, live_db):
        repo = HackathonRepository(live_db)

        started = await repo.set_status(True, start_time="2025-01-01T00:00:00.000Z")
        stopped = await repo.set_status(False, start_time=started.start_time, end_time="2025-01-02T00:00:00.000Z")

        assert started.is_active
        assert not stopped.is_active
        assert (await repo.get_status()).end_time == "2025-01-02T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_review_updates_submission(self, live_db):
        _, _, _, _, submission = await _seed_acme(live_db)

        reviewed = await SubmissionRepository(live_db).review(submission.id, "approved", 100, "nice")

        assert reviewed.status == "approved"
        assert reviewed.points_awarded == 100
        assert reviewed.is_reviewed()
