"""
db/ - Database Layer
====================
Owns the PostgreSQL connection pool, the schema bootstrapper and the
query-execution facade. This layer is the lowest in the architecture and
has no dependencies on repositories or services.
"""

from db.connection import QueryResult
from db.database import Database
from db.errors import (
    ConfigurationError,
    DatabaseConnectionError,
    DataLayerError,
    QueryTimeout,
    SchemaInitializationError,
)

__all__ = [
    "ConfigurationError",
    "Database",
    "DatabaseConnectionError",
    "DataLayerError",
    "QueryResult",
    "QueryTimeout",
    "SchemaInitializationError",
]
