"""
db/errors.py
------------
Exception taxonomy for the data layer, plus the classifiers that decide
which driver errors are connection failures and which migration errors
are benign "already exists" conflicts.
"""

import psycopg2
from psycopg2 import errors as pg_errors

# psycopg2 raises one class per SQLSTATE; these all mean "already there".
BENIGN_CONFLICT_ERRORS: tuple[type, ...] = (
    pg_errors.DuplicateColumn,
    pg_errors.DuplicateObject,
    pg_errors.DuplicateTable,
    pg_errors.DuplicateSchema,
    pg_errors.UniqueViolation,
)

# Catalog index hit when two sessions create the same table concurrently.
CATALOG_TYPE_INDEX = "pg_type_typname_nsp_index"


class DataLayerError(Exception):
    """Base class for every error raised by the data layer."""


class ConfigurationError(DataLayerError):
    """No connection string could be resolved from the environment."""


class DatabaseConnectionError(DataLayerError):
    """Network, DNS, refused or timed-out connection to the database."""


class QueryTimeout(DataLayerError):
    """A single statement lost the race against the client-side timer."""


class SchemaInitializationError(DataLayerError):
    """A migration step failed for a reason other than a benign conflict."""


def is_connection_failure(exc: BaseException) -> bool:
    """
    Decide whether a driver error happened while talking to the server
    rather than inside a statement.

    libpq reports refused connections, unknown hosts, connect timeouts and
    dropped sockets as a bare OperationalError; errors the server raises
    for a statement arrive as SQLSTATE subclasses (QueryCanceled, ...).
    """
    if isinstance(exc, psycopg2.InterfaceError):
        return True
    if isinstance(exc, psycopg2.Error):
        return type(exc) is psycopg2.OperationalError
    return isinstance(exc, OSError)


def is_benign_conflict(exc: BaseException) -> bool:
    """True when a migration error only says the object already exists."""
    if isinstance(exc, BENIGN_CONFLICT_ERRORS):
        return True
    return isinstance(exc, psycopg2.Error) and CATALOG_TYPE_INDEX in str(exc)
