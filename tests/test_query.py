"""
QueryRunner: timeout race and error classification.
"""

import asyncio

import psycopg2
import pytest
from psycopg2 import errors as pg_errors

from db.errors import ConfigurationError, DatabaseConnectionError, QueryTimeout
from db.query import QueryRunner
from tests.fakes import FakePool


def _runner(pool, timeout=5.0):
    return QueryRunner(lambda: pool, timeout=timeout)


class TestExecute:

    @pytest.mark.asyncio
    async def test_returns_rows_and_count(self, fake_pool):
        result = await _runner(fake_pool).execute("SELECT 1")

        assert result.rows == [{"?column?": 1}]
        assert result.row_count == 1

    @pytest.mark.asyncio
    async def test_params_passed_through(self, fake_pool):
        await _runner(fake_pool).execute("SELECT * FROM teams WHERE id = %s", ("t1",))

        assert fake_pool.calls == [("SELECT * FROM teams WHERE id = %s", ("t1",))]

    @pytest.mark.asyncio
    async def test_fast_query_beats_timer(self):
        pool = FakePool(delay=0.05)

        result = await _runner(pool, timeout=1.0).execute("SELECT 1")

        assert result.row_count == 1


class TestTimeout:

    @pytest.mark.asyncio
    async def test_slow_query_raises_timeout(self):
        pool = FakePool(delay=0.3)

        with pytest.raises(QueryTimeout) as exc_info:
            await _runner(pool, timeout=0.1).execute("SELECT 1")

        assert "Database query timeout after 0.1 seconds" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_abandoned_query_still_finishes(self):
        pool = FakePool(delay=0.2)

        with pytest.raises(QueryTimeout):
            await _runner(pool, timeout=0.05).execute("SELECT 1")
        assert pool.completed == 0

        await asyncio.sleep(0.4)
        assert pool.completed == 1

    @pytest.mark.asyncio
    async def test_none_disables_timer(self):
        pool = FakePool(delay=0.2)

        result = await _runner(pool, timeout=0.05).execute("SELECT 1", timeout=None)

        assert result.row_count == 1

    @pytest.mark.asyncio
    async def test_per_call_override(self):
        pool = FakePool(delay=0.2)

        with pytest.raises(QueryTimeout):
            await _runner(pool, timeout=5.0).execute("SELECT 1", timeout=0.05)


class TestErrorClassification:

    @pytest.mark.asyncio
    async def test_refused_connection_is_wrapped(self):
        cause = psycopg2.OperationalError("could not connect to server: Connection refused")
        pool = FakePool(fail_on={"SELECT": cause})

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await _runner(pool).execute("SELECT 1")

        assert exc_info.value.__cause__ is cause
        assert "Database connection failed" in str(exc_info.value)
        assert "POSTGRES_URL" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_socket_error_is_wrapped(self):
        pool = FakePool(fail_on={"SELECT": ConnectionRefusedError("ECONNREFUSED")})

        with pytest.raises(DatabaseConnectionError):
            await _runner(pool).execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_constraint_violation_propagates(self):
        cause = pg_errors.UniqueViolation("duplicate key value violates unique constraint")
        pool = FakePool(fail_on={"INSERT": cause})

        with pytest.raises(pg_errors.UniqueViolation) as exc_info:
            await _runner(pool).execute("INSERT INTO teams VALUES (%s)", ("t1",))

        assert exc_info.value is cause

    @pytest.mark.asyncio
    async def test_server_statement_timeout_is_not_a_connection_error(self):
        pool = FakePool(fail_on={"SELECT": pg_errors.QueryCanceled("canceling statement due to statement timeout")})

        with pytest.raises(pg_errors.QueryCanceled):
            await _runner(pool).execute("SELECT pg_sleep(60)")

    @pytest.mark.asyncio
    async def test_missing_configuration_propagates(self):
        def no_pool():
            raise ConfigurationError("Missing PostgreSQL connection string.")

        with pytest.raises(ConfigurationError):
            await QueryRunner(no_pool).execute("SELECT 1")
