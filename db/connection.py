"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Builds on psycopg2's ThreadedConnectionPool, adding idle-connection
recycling, a bounded wait for a free slot, and dict rows.
"""

import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import psycopg2
from psycopg2 import extensions, extras, pool

from config import (
    DATABASE_URL_VARS,
    DB_CONNECT_TIMEOUT_SECONDS,
    DB_IDLE_TIMEOUT_SECONDS,
    DB_KEEPALIVE_IDLE_SECONDS,
    DB_POOL_MAX,
    DB_POOL_MIN,
    DB_STATEMENT_TIMEOUT_MS,
    get_database_url,
    is_cloud_deployment,
)
from db.errors import ConfigurationError, is_connection_failure
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class QueryResult:
    """Rows (as dicts keyed by column name) and the affected row count."""
    rows: list[dict] = field(default_factory=list)
    row_count: int = 0


def build_connect_kwargs(dsn: str) -> dict:
    """
    libpq parameters applied to every pooled connection.

    TLS is only switched on when the connection string asks for
    ``sslmode=require``. libpq's ``require`` mode encrypts without checking
    the certificate chain, so self-signed provider certificates are accepted.
    """
    kwargs: dict[str, Any] = {
        "connect_timeout": DB_CONNECT_TIMEOUT_SECONDS,
        "keepalives": 1,
        "keepalives_idle": DB_KEEPALIVE_IDLE_SECONDS,
        "options": f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}",
    }
    if "sslmode=require" in dsn:
        kwargs["sslmode"] = "require"
    elif "sslmode=" not in dsn:
        kwargs["sslmode"] = "disable"
    return kwargs


def missing_url_message() -> str:
    """Remediation text for a missing connection string."""
    names = " or ".join(DATABASE_URL_VARS)
    if is_cloud_deployment():
        return (
            "Missing PostgreSQL connection string on Vercel.\n"
            f"Please set {names} in Vercel project settings:\n"
            "1. Go to your Vercel project\n"
            "2. Settings → Environment Variables\n"
            f"3. Add {DATABASE_URL_VARS[0]} with your database connection string\n"
            "4. Redeploy the application"
        )
    seen = ", ".join(f"{var}={_env_flag(var)}" for var in DATABASE_URL_VARS)
    return (
        "Missing PostgreSQL connection string.\n"
        f"Please set {names} in .env.local\n"
        f"Current env check: {seen}"
    )


def _env_flag(var: str) -> str:
    return "true" if os.getenv(var) else "false"


class ConnectionPool(pool.ThreadedConnectionPool):
    """
    Thread-safe pool shared by every request of the process.

    Connections are autocommit, so each statement is its own unit of work.
    Idle connections are kept up to ``maxconn``; those idle for longer than
    ``idle_timeout`` are closed at the next checkout while at least
    ``minconn`` remain. Checkout blocks at most ``checkout_timeout`` seconds
    when every slot is in use.
    """

    def __init__(
        self,
        dsn: str,
        minconn: int = DB_POOL_MIN,
        maxconn: int = DB_POOL_MAX,
        idle_timeout: float = DB_IDLE_TIMEOUT_SECONDS,
        checkout_timeout: float = DB_CONNECT_TIMEOUT_SECONDS,
    ):
        self.idle_timeout = idle_timeout
        self.checkout_timeout = checkout_timeout
        self._idle_since: dict[int, float] = {}
        self._slots = threading.BoundedSemaphore(maxconn)
        super().__init__(minconn, maxconn, dsn, **build_connect_kwargs(dsn))
        logger.info(f"Database connection pool initialized ({minconn}-{maxconn} connections).")

    # ── CHECKOUT / RETURN ─────────────────────────────────

    def getconn(self, key=None):
        if not self._slots.acquire(timeout=self.checkout_timeout):
            raise psycopg2.OperationalError(
                "timeout expired waiting for a pooled connection"
            )
        try:
            return super().getconn(key)
        except Exception:
            self._slots.release()
            raise

    def putconn(self, conn=None, key=None, close=False):
        try:
            super().putconn(conn, key, close)
        finally:
            self._slots.release()

    def closeall(self):
        super().closeall()
        self._idle_since.clear()
        logger.info("Database connection pool closed.")

    # ── STATEMENT EXECUTION ───────────────────────────────

    def run(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        """
        Execute one statement on a pooled connection (blocking).

        Args:
            sql: Statement with positional ``%s`` placeholders.
            params: Values bound to the placeholders, in order.

        Returns:
            QueryResult with dict rows and the driver's row count.
        """
        conn = self.getconn()
        close = False
        try:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute(sql, params)
                rows = [dict(r) for r in cur.fetchall()] if cur.description else []
                return QueryResult(rows=rows, row_count=cur.rowcount)
        except psycopg2.Error as e:
            close = bool(conn.closed) or is_connection_failure(e)
            raise
        finally:
            self.putconn(conn, close=close)

    # ── psycopg2 pool hooks (called with self._lock held) ──

    def _connect(self, key=None):
        conn = super()._connect(key)
        conn.autocommit = True
        if key is None:
            self._idle_since[id(conn)] = time.monotonic()
        return conn

    def _getconn(self, key=None):
        self._recycle_idle()
        conn = super()._getconn(key)
        self._idle_since.pop(id(conn), None)
        return conn

    def _putconn(self, conn, key=None, close=False):
        if self.closed:
            raise pool.PoolError("connection pool is closed")
        if key is None:
            key = self._rused.get(id(conn))
            if key is None:
                raise pool.PoolError("trying to put unkeyed connection")

        if close or conn.closed:
            if not conn.closed:
                conn.close()
        else:
            status = conn.info.transaction_status
            if status == extensions.TRANSACTION_STATUS_UNKNOWN:
                logger.error("Unexpected error on returned connection, discarding it.")
                conn.close()
            else:
                if status != extensions.TRANSACTION_STATUS_IDLE:
                    conn.rollback()
                self._pool.append(conn)
                self._idle_since[id(conn)] = time.monotonic()

        self._used.pop(key, None)
        self._rused.pop(id(conn), None)

    def _recycle_idle(self) -> None:
        now = time.monotonic()
        for conn in list(self._pool):
            if conn.closed:
                logger.error("Unexpected error on idle client: connection was closed by the server.")
                self._drop_idle(conn)
            elif (
                len(self._pool) + len(self._used) > self.minconn
                and now - self._idle_since.get(id(conn), now) > self.idle_timeout
            ):
                self._drop_idle(conn)

    def _drop_idle(self, conn) -> None:
        self._pool.remove(conn)
        self._idle_since.pop(id(conn), None)
        if not conn.closed:
            conn.close()


def create_pool(dsn: Optional[str] = None) -> ConnectionPool:
    """
    Create the pool from an explicit DSN or the environment.

    Raises:
        ConfigurationError: If no connection string is configured.
        psycopg2.OperationalError: If the warm connections cannot be opened.
    """
    dsn = dsn or get_database_url()
    if not dsn:
        raise ConfigurationError(missing_url_message())
    return ConnectionPool(dsn)
