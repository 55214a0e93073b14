"""
db/query.py
-----------
The single statement-execution primitive handed to repositories.

Blocking psycopg2 work runs on a worker thread so the event loop keeps
serving other requests. Each statement races a client-side timer; when the
timer wins the caller gets QueryTimeout, but nothing is sent to the server:
the worker thread finishes (or fails) on its own and hands its connection
back to the pool.
"""

import asyncio
from typing import Any, Callable, Optional, Sequence

import psycopg2

from config import QUERY_TIMEOUT_SECONDS
from db.connection import ConnectionPool, QueryResult
from db.errors import DatabaseConnectionError, QueryTimeout, is_connection_failure
from utils.logger import get_logger

logger = get_logger(__name__)

_UNSET: Any = object()


class QueryRunner:
    """Runs parameterized statements through the pool with a timeout."""

    def __init__(
        self,
        pool_provider: Callable[[], ConnectionPool],
        timeout: Optional[float] = QUERY_TIMEOUT_SECONDS,
    ):
        self._pool_provider = pool_provider
        self.timeout = timeout

    async def execute(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        timeout: Optional[float] = _UNSET,
    ) -> QueryResult:
        """
        Execute one statement and return its rows and row count.

        Args:
            sql: Statement with positional ``%s`` placeholders.
            params: Values for the placeholders, in order.
            timeout: Override of the race timer in seconds; None disables it.

        Raises:
            QueryTimeout: The timer fired before the statement settled.
            DatabaseConnectionError: The database could not be reached.
            ConfigurationError: No connection string is configured.
        """
        limit = self.timeout if timeout is _UNSET else timeout
        work = asyncio.to_thread(self._run, sql, params)
        try:
            if limit is None:
                return await work
            return await asyncio.wait_for(work, timeout=limit)
        except asyncio.TimeoutError:
            logger.warning(f"Query exceeded {limit}s and was abandoned: {_preview(sql)}")
            raise QueryTimeout(
                f"Database query timeout after {limit:g} seconds - "
                "connection may be slow or unavailable"
            ) from None
        except (psycopg2.Error, OSError) as e:
            if is_connection_failure(e):
                raise DatabaseConnectionError(
                    f"Database connection failed: {e}. "
                    "Please check your POSTGRES_URL in .env.local and ensure the database is accessible. "
                    "If using a remote database, verify network connectivity and firewall settings."
                ) from e
            raise

    def _run(self, sql: str, params: Optional[Sequence[Any]]) -> QueryResult:
        return self._pool_provider().run(sql, params)


def _preview(sql: str, width: int = 80) -> str:
    flat = " ".join(sql.split())
    return flat if len(flat) <= width else flat[: width - 3] + "..."
