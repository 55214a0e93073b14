"""
db/database.py
--------------
The entry point every repository goes through.

A Database owns the connection pool, the schema bootstrapper and the
cached outcome of the first initialization. Build one at process start
and hand it to every repository.
"""

import threading
from typing import Any, Callable, Optional, Sequence

import psycopg2

from config import QUERY_TIMEOUT_SECONDS
from db.connection import ConnectionPool, QueryResult, create_pool
from db.errors import ConfigurationError, DatabaseConnectionError, DataLayerError, QueryTimeout
from db.init_db import SchemaBootstrapper
from db.query import QueryRunner
from utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Lazily connects, bootstraps the schema once, then stays out of the way.

    After the first successful ``get_db()`` the ready flag is cached and
    later calls return the runner without probing or checking the schema.
    If the first initialization fails, that error is cached instead and
    re-raised by every later call without touching the database again;
    only a process restart (or a new Database) clears it.
    """

    def __init__(
        self,
        dsn: Optional[str] = None,
        pool_factory: Callable[[Optional[str]], ConnectionPool] = create_pool,
        query_timeout: Optional[float] = QUERY_TIMEOUT_SECONDS,
    ):
        self._dsn = dsn
        self._pool_factory = pool_factory
        self._pool: Optional[ConnectionPool] = None
        self._pool_lock = threading.Lock()
        self.runner = QueryRunner(self.acquire_pool, timeout=query_timeout)
        self.bootstrapper = SchemaBootstrapper(self.runner)
        self._ready = False
        self._init_error: Optional[DataLayerError] = None

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def init_error(self) -> Optional[DataLayerError]:
        return self._init_error

    def acquire_pool(self) -> ConnectionPool:
        """
        Return the pool, creating it on first use (blocking).

        Raises:
            ConfigurationError: No connection string is configured.
            psycopg2.OperationalError: The warm connections could not open.
        """
        if self._pool is None:
            with self._pool_lock:
                if self._pool is None:
                    self._pool = self._pool_factory(self._dsn)
        return self._pool

    async def get_db(self) -> QueryRunner:
        """
        Return the query runner once the database is reachable and migrated.

        Raises:
            DataLayerError: The cached first-initialization failure.
        """
        if not self._ready and self._init_error is None:
            try:
                await self._probe()
                # Another caller may have settled initialization while this probe ran.
                if not self._ready and self._init_error is None:
                    await self.bootstrapper.ensure_ready()
                    self._ready = True
            except DataLayerError as e:
                if self._ready:
                    raise
                if self._init_error is None:
                    self._init_error = e
                    logger.error(f"Database initialization failed: {e}")
        if self._init_error is not None:
            raise self._init_error
        return self.runner

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        """Shortcut for ``(await get_db()).execute(sql, params)``."""
        runner = await self.get_db()
        return await runner.execute(sql, params)

    async def _probe(self) -> None:
        try:
            await self.runner.execute("SELECT 1")
        except (DatabaseConnectionError, ConfigurationError):
            raise
        except (QueryTimeout, psycopg2.Error, OSError) as e:
            raise DatabaseConnectionError(
                f"Database connection test failed: {e}. "
                "Please verify your POSTGRES_URL in .env.local is correct and the database is accessible."
            ) from e

    def close(self) -> None:
        """Close every pooled connection."""
        with self._pool_lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None
