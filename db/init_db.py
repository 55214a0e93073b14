"""
db/init_db.py
-------------
Brings a database of any age (empty, or created by an earlier release)
up to the current schema. Safe to run repeatedly and from several
processes at once: every step checks the catalog before touching it,
and "already exists" conflicts count as success.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Awaitable, Callable, Optional

import psycopg2

from db.errors import DataLayerError, SchemaInitializationError, is_benign_conflict
from db.query import QueryRunner
from utils.helpers import now_iso
from utils.logger import get_logger

logger = get_logger(__name__)


class BootstrapState(Enum):
    NOT_STARTED = "not_started"
    INITIALIZING = "initializing"
    READY = "ready"


class StepResult(Enum):
    APPLIED = "applied"
    ALREADY_PRESENT = "already_present"
    FAILED = "failed"


@dataclass
class StepOutcome:
    """What one migration step did."""
    name: str
    result: StepResult
    reason: Optional[str] = None


@dataclass(frozen=True)
class MigrationStep:
    """
    A DDL statement guarded by a catalog lookup.

    Attributes:
        name: Label used in logs and outcomes.
        check_sql: Query returning a row when the object already exists.
        check_params: Values for ``check_sql``.
        ddl: Statement creating the object.
        fatal: Whether a non-benign failure aborts the whole sequence.
    """
    name: str
    check_sql: str
    check_params: tuple
    ddl: str
    fatal: bool


_TABLE_EXISTS_SQL = """
    SELECT 1 FROM information_schema.tables
    WHERE table_schema = current_schema() AND table_name = %s
"""

_COLUMN_EXISTS_SQL = """
    SELECT 1 FROM information_schema.columns
    WHERE table_schema = current_schema() AND table_name = %s AND column_name = %s
"""

_CONSTRAINT_EXISTS_SQL = """
    SELECT 1 FROM information_schema.table_constraints
    WHERE table_schema = current_schema() AND table_name = %s AND constraint_name = %s
"""


def table_step(table: str, ddl: str) -> MigrationStep:
    return MigrationStep(f"create table {table}", _TABLE_EXISTS_SQL, (table,), ddl, fatal=True)


def column_step(table: str, column: str, ddl: str) -> MigrationStep:
    return MigrationStep(
        f"add column {table}.{column}", _COLUMN_EXISTS_SQL, (table, column), ddl, fatal=False,
    )


def constraint_step(table: str, constraint: str, ddl: str) -> MigrationStep:
    # The DDL leaves the name unquoted, so the catalog stores it lowercased.
    return MigrationStep(
        f"add constraint {constraint}", _CONSTRAINT_EXISTS_SQL, (table, constraint.lower()), ddl,
        fatal=False,
    )


# ── Schema ────────────────────────────────────────────────
# Order matters: referenced tables come before the tables and
# constraints that point at them.

MIGRATION_STEPS: tuple[MigrationStep, ...] = (
    table_step("tenants", """
        CREATE TABLE IF NOT EXISTS tenants (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            "adminUsername" TEXT NOT NULL UNIQUE,
            "adminPassword" TEXT NOT NULL,
            "createdAt" TEXT NOT NULL,
            "updatedAt" TEXT NOT NULL
        )
    """),
    # Created without the tenant reference; older databases lack it too.
    table_step("teams", """
        CREATE TABLE IF NOT EXISTS teams (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            username TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            "createdAt" TEXT NOT NULL
        )
    """),
    column_step("teams", "tenantId", 'ALTER TABLE teams ADD COLUMN "tenantId" TEXT'),
    constraint_step("teams", "teams_tenantId_fkey", """
        ALTER TABLE teams
        ADD CONSTRAINT teams_tenantId_fkey
        FOREIGN KEY("tenantId") REFERENCES tenants(id) ON DELETE CASCADE
    """),
    table_step("tasks", """
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            category TEXT NOT NULL,
            difficulty TEXT NOT NULL,
            description TEXT NOT NULL,
            flag TEXT NOT NULL,
            points INTEGER NOT NULL,
            resources TEXT NOT NULL
        )
    """),
    table_step("assignments", """
        CREATE TABLE IF NOT EXISTS assignments (
            id TEXT PRIMARY KEY,
            "teamId" TEXT NOT NULL,
            "taskId" TEXT NOT NULL,
            status TEXT NOT NULL,
            "lastUpdated" TEXT NOT NULL,
            UNIQUE("teamId", "taskId"),
            FOREIGN KEY("teamId") REFERENCES teams(id) ON DELETE CASCADE,
            FOREIGN KEY("taskId") REFERENCES tasks(id) ON DELETE CASCADE
        )
    """),
    table_step("submissions", """
        CREATE TABLE IF NOT EXISTS submissions (
            id TEXT PRIMARY KEY,
            "assignmentId" TEXT NOT NULL UNIQUE,
            "teamId" TEXT NOT NULL,
            plan TEXT NOT NULL,
            findings TEXT NOT NULL,
            flag TEXT NOT NULL,
            "createdAt" TEXT NOT NULL,
            "updatedAt" TEXT NOT NULL,
            status TEXT DEFAULT 'pending',
            "pointsAwarded" INTEGER DEFAULT 0,
            "adminNotes" TEXT DEFAULT '',
            "reviewedAt" TEXT,
            FOREIGN KEY("teamId") REFERENCES teams(id) ON DELETE CASCADE,
            FOREIGN KEY("assignmentId") REFERENCES assignments(id) ON DELETE CASCADE
        )
    """),
    table_step("admin_sessions", """
        CREATE TABLE IF NOT EXISTS admin_sessions (
            token TEXT PRIMARY KEY,
            "createdAt" TEXT NOT NULL
        )
    """),
    column_step(
        "admin_sessions", "adminType",
        """ALTER TABLE admin_sessions ADD COLUMN "adminType" TEXT DEFAULT 'super'""",
    ),
    column_step("admin_sessions", "tenantId", 'ALTER TABLE admin_sessions ADD COLUMN "tenantId" TEXT'),
    constraint_step("admin_sessions", "admin_sessions_tenantId_fkey", """
        ALTER TABLE admin_sessions
        ADD CONSTRAINT admin_sessions_tenantId_fkey
        FOREIGN KEY("tenantId") REFERENCES tenants(id) ON DELETE CASCADE
    """),
    table_step("hackathon_status", """
        CREATE TABLE IF NOT EXISTS hackathon_status (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            "isActive" INTEGER DEFAULT 0,
            "startTime" TEXT,
            "endTime" TEXT,
            "createdAt" TEXT NOT NULL,
            "updatedAt" TEXT NOT NULL
        )
    """),
    table_step("hackathon_tasks", """
        CREATE TABLE IF NOT EXISTS hackathon_tasks (
            "taskId" TEXT PRIMARY KEY,
            "createdAt" TEXT NOT NULL,
            FOREIGN KEY("taskId") REFERENCES tasks(id) ON DELETE CASCADE
        )
    """),
    table_step("learning_materials", """
        CREATE TABLE IF NOT EXISTS learning_materials (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            module TEXT NOT NULL,
            "fileUrl" TEXT NOT NULL,
            "fileName" TEXT NOT NULL,
            "fileType" TEXT NOT NULL,
            "fileSize" INTEGER,
            "uploadedBy" TEXT,
            "createdAt" TEXT NOT NULL,
            "updatedAt" TEXT NOT NULL
        )
    """),
)

INDEXES_SQL = """
    CREATE INDEX IF NOT EXISTS idx_submissions_teamId ON submissions("teamId");
    CREATE INDEX IF NOT EXISTS idx_submissions_assignmentId ON submissions("assignmentId");
    CREATE INDEX IF NOT EXISTS idx_submissions_status ON submissions(status);
    CREATE INDEX IF NOT EXISTS idx_assignments_teamId ON assignments("teamId");
    CREATE INDEX IF NOT EXISTS idx_assignments_taskId ON assignments("taskId");
    CREATE INDEX IF NOT EXISTS idx_hackathon_tasks_taskId ON hackathon_tasks("taskId");
    CREATE INDEX IF NOT EXISTS idx_teams_tenantId ON teams("tenantId");
    CREATE INDEX IF NOT EXISTS idx_learning_materials_module ON learning_materials(module);
    CREATE INDEX IF NOT EXISTS idx_admin_sessions_tenantId ON admin_sessions("tenantId");
"""

SEED_STATUS_SQL = """
    INSERT INTO hackathon_status (id, "isActive", "startTime", "endTime", "createdAt", "updatedAt")
    VALUES (1, 0, NULL, NULL, %s, %s)
    ON CONFLICT (id) DO NOTHING
"""


def _remediation(message: str) -> str:
    return (
        f"Database schema initialization failed: {message}\n"
        "Make sure:\n"
        "1. .env.local file exists with POSTGRES_URL\n"
        "2. The application was restarted after creating .env.local\n"
        "3. Connection string is correct\n"
        f"Original error: {message}"
    )


class SchemaBootstrapper:
    """
    Runs the migration sequence at most once per process.

    The first caller of ``ensure_ready()`` starts the sequence; callers that
    arrive while it runs await the same future. A failure puts the state
    back to NOT_STARTED so a later caller can try again.
    """

    def __init__(self, runner: QueryRunner):
        self.runner = runner
        self.state = BootstrapState.NOT_STARTED
        self.outcomes: list[StepOutcome] = []
        self.runs = 0
        self._in_flight: Optional[asyncio.Future] = None

    async def ensure_ready(self) -> None:
        if self.state is BootstrapState.READY:
            return
        if self._in_flight is None:
            self.state = BootstrapState.INITIALIZING
            self._in_flight = asyncio.ensure_future(self._bootstrap())
        await asyncio.shield(self._in_flight)

    async def _bootstrap(self) -> None:
        self.runs += 1
        try:
            self.outcomes = await self.run_migrations()
        except (psycopg2.Error, DataLayerError) as e:
            if is_benign_conflict(e):
                logger.warning(
                    "Schema modification conflict detected (likely concurrent initialization), "
                    f"treating as initialized: {e}"
                )
                self.state = BootstrapState.READY
                return
            self.state = BootstrapState.NOT_STARTED
            logger.error(f"Database schema initialization error: {e}")
            raise SchemaInitializationError(_remediation(str(e))) from e
        else:
            self.state = BootstrapState.READY
            applied = sum(1 for o in self.outcomes if o.result is StepResult.APPLIED)
            logger.info(f"Database schema initialized successfully ({applied} steps applied).")
        finally:
            self._in_flight = None

    async def run_migrations(self) -> list[StepOutcome]:
        """
        Execute every step in order and return their outcomes.

        Raises:
            psycopg2.Error | DataLayerError: A table could not be created.
        """
        outcomes = []
        for step in MIGRATION_STEPS:
            outcomes.append(await self._guarded(step.name, step.fatal, partial(self._apply, step)))
        outcomes.append(await self._guarded("create secondary indexes", False, self._create_indexes))
        outcomes.append(await self._guarded("seed hackathon_status", False, self._seed_status))
        return outcomes

    # ── STEPS ─────────────────────────────────────────────

    async def _guarded(
        self, name: str, fatal: bool, action: Callable[[], Awaitable[StepResult]]
    ) -> StepOutcome:
        try:
            outcome = StepOutcome(name, await action())
        except (psycopg2.Error, DataLayerError) as e:
            if is_benign_conflict(e):
                outcome = StepOutcome(name, StepResult.ALREADY_PRESENT, str(e))
            elif fatal:
                raise
            else:
                logger.warning(f"Migration step '{name}' failed, continuing: {e}")
                outcome = StepOutcome(name, StepResult.FAILED, str(e))
        logger.debug(f"Migration step '{name}': {outcome.result.value}")
        return outcome

    async def _apply(self, step: MigrationStep) -> StepResult:
        found = await self._query(step.check_sql, step.check_params)
        if found.rows:
            return StepResult.ALREADY_PRESENT
        await self._query(step.ddl)
        return StepResult.APPLIED

    async def _create_indexes(self) -> StepResult:
        await self._query(INDEXES_SQL)
        return StepResult.APPLIED

    async def _seed_status(self) -> StepResult:
        now = now_iso()
        result = await self._query(SEED_STATUS_SQL, (now, now))
        return StepResult.APPLIED if result.row_count == 1 else StepResult.ALREADY_PRESENT

    async def _query(self, sql: str, params: Optional[tuple] = None):
        # DDL is not raced against the client timer; the server-side
        # statement_timeout still applies.
        return await self.runner.execute(sql, params, timeout=None)
