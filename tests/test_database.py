"""
Database facade: lazy pool, readiness probe and the cached first failure.
"""

import asyncio
import time

import psycopg2
import pytest
from psycopg2 import errors as pg_errors

from db import ConfigurationError, Database, DatabaseConnectionError, SchemaInitializationError
from db.connection import QueryResult
from tests.fakes import FakePool, make_database


def _failing_factory(exc):
    calls = []

    def factory(dsn):
        calls.append(dsn)
        raise exc

    factory.calls = calls
    return factory


class TestMissingConfiguration:

    @pytest.mark.asyncio
    async def test_local_wording(self):
        db = Database()

        with pytest.raises(ConfigurationError) as exc_info:
            await db.get_db()

        message = str(exc_info.value)
        assert "Missing PostgreSQL connection string" in message
        assert "POSTGRES_URL or DATABASE_URL" in message
        assert ".env.local" in message
        assert "POSTGRES_URL=false" in message

    @pytest.mark.asyncio
    async def test_hosted_wording(self, monkeypatch):
        monkeypatch.setenv("VERCEL", "1")
        db = Database()

        with pytest.raises(ConfigurationError) as exc_info:
            await db.get_db()

        assert "Vercel project settings" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_is_cached(self, monkeypatch):
        db = Database()
        with pytest.raises(ConfigurationError) as first:
            await db.get_db()

        monkeypatch.setenv("POSTGRES_URL", "postgresql://late/db")
        with pytest.raises(ConfigurationError) as second:
            await db.get_db()

        assert second.value is first.value
        assert db.init_error is first.value


class TestConnectionFailure:

    @pytest.mark.asyncio
    async def test_unreachable_host(self):
        factory = _failing_factory(psycopg2.OperationalError(
            'could not translate host name "db.invalid" to address'
        ))
        db = Database(dsn="postgresql://db.invalid/app", pool_factory=factory)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await db.get_db()

        assert "could not translate host name" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, psycopg2.OperationalError)

    @pytest.mark.asyncio
    async def test_later_calls_fail_fast_with_same_error(self):
        factory = _failing_factory(psycopg2.OperationalError("Connection refused"))
        db = Database(dsn="postgresql://localhost:1/app", pool_factory=factory)

        with pytest.raises(DatabaseConnectionError) as first:
            await db.get_db()
        for _ in range(3):
            with pytest.raises(DatabaseConnectionError) as again:
                await db.get_db()
            assert again.value is first.value

        assert len(factory.calls) == 1
        assert not db.is_ready

    @pytest.mark.asyncio
    async def test_probe_timeout_reported_as_connection_failure(self):
        pool = FakePool(delay=0.2)
        db = make_database(pool, timeout=0.05)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await db.get_db()

        assert "Database connection test failed" in str(exc_info.value)
        assert "Database query timeout" in str(exc_info.value)


class TestReadiness:

    @pytest.mark.asyncio
    async def test_pool_created_lazily(self, fake_pool):
        db = make_database(fake_pool)
        assert db.factory_calls == []

        await db.get_db()

        assert db.factory_calls == ["postgresql://fake/db"]

    @pytest.mark.asyncio
    async def test_ready_skips_probe_and_bootstrap(self, fake_db, fake_pool):
        await fake_db.get_db()
        calls_after_init = len(fake_pool.calls)

        runner = await fake_db.get_db()

        assert runner is fake_db.runner
        assert fake_db.is_ready
        assert len(fake_pool.calls) == calls_after_init
        assert fake_db.bootstrapper.runs == 1

    @pytest.mark.asyncio
    async def test_bootstrap_failure_is_cached(self):
        pool = FakePool(fail_on={
            "CREATE TABLE IF NOT EXISTS tenants": pg_errors.InsufficientPrivilege("permission denied"),
        })
        db = make_database(pool)

        with pytest.raises(SchemaInitializationError) as first:
            await db.get_db()
        pool.fail_on.clear()
        with pytest.raises(SchemaInitializationError) as second:
            await db.get_db()

        assert second.value is first.value
        assert db.bootstrapper.runs == 1

    @pytest.mark.asyncio
    async def test_execute_shortcut(self, fake_db, fake_pool):
        fake_pool.responses["FROM teams"] = QueryResult(rows=[{"id": "t1"}], row_count=1)

        result = await fake_db.execute("SELECT * FROM teams WHERE id = %s", ("t1",))

        assert result.rows == [{"id": "t1"}]
        assert fake_db.is_ready

    @pytest.mark.asyncio
    async def test_close_releases_pool(self, fake_db, fake_pool):
        await fake_db.get_db()

        fake_db.close()

        assert fake_pool.closed
        fake_db.acquire_pool()
        assert len(fake_db.factory_calls) == 2


class _StallingSecondPingPool(FakePool):
    """The second SELECT 1 stalls until the first caller's bootstrap has settled."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.pings = 0

    def run(self, sql, params=None):
        if sql == "SELECT 1":
            with self._lock:
                self.pings += 1
                ping = self.pings
            if ping == 2:
                time.sleep(0.3)
        return super().run(sql, params)


class TestSettledWhileProbing:

    @pytest.mark.asyncio
    async def test_late_caller_reuses_cached_failure(self):
        pool = _StallingSecondPingPool(fail_on={
            "CREATE TABLE IF NOT EXISTS tenants": pg_errors.InsufficientPrivilege("permission denied"),
        })
        db = make_database(pool)

        first, second = await asyncio.gather(db.get_db(), db.get_db(), return_exceptions=True)

        assert isinstance(first, SchemaInitializationError)
        assert second is first
        assert db.init_error is first
        assert db.bootstrapper.runs == 1
        assert len(pool.statements("CREATE TABLE IF NOT EXISTS tenants")) == 1

    @pytest.mark.asyncio
    async def test_late_caller_skips_bootstrap_after_success(self):
        pool = _StallingSecondPingPool()
        db = make_database(pool)

        runners = await asyncio.gather(db.get_db(), db.get_db())

        assert all(r is db.runner for r in runners)
        assert db.bootstrapper.runs == 1
        assert len(pool.statements("CREATE TABLE IF NOT EXISTS tenants")) == 1
