"""
services/results.py
-------------------
Structured outcomes for service calls.

Services return plain dicts: ``{"success": True, ...}`` on success and
``{"success": False, "error": <English message>, "code": <kind>}`` on
failure, so the layer above can map them to responses without ever
seeing a stack trace.
"""

from functools import wraps
from typing import Callable

import psycopg2
from psycopg2 import errors as pg_errors

from db.errors import DataLayerError
from utils.logger import get_logger

logger = get_logger(__name__)


class ServiceError(Exception):
    """A request the service refuses; ``code`` names the kind of failure."""
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(ServiceError):
    code = "invalid_input"


class Unauthorized(ServiceError):
    code = "unauthorized"


class Forbidden(ServiceError):
    code = "forbidden"


class NotFound(ServiceError):
    code = "not_found"


class Conflict(ServiceError):
    code = "conflict"


def success(**data) -> dict:
    return {"success": True, **data}


def failure(message: str, code: str) -> dict:
    return {"success": False, "error": message, "code": code}


def reports_failures(func: Callable):
    """
    Decorator turning service and data-layer exceptions into failure dicts.

    Behavior:
        - ServiceError subclasses keep their message and code.
        - Uniqueness violations become 'conflict'.
        - Data-layer errors (configuration, connection, timeout, schema)
          become 'database_error' with their remediation text.
        - Any other driver error (statement timeout, foreign key race, ...)
          becomes a generic 'database_error'.
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except ServiceError as e:
            logger.warning(f"{func.__qualname__} refused: {e.message}")
            return failure(e.message, e.code)
        except pg_errors.UniqueViolation as e:
            logger.warning(f"{func.__qualname__} conflict: {e}")
            return failure("A record with the same unique value already exists", Conflict.code)
        except DataLayerError as e:
            logger.error(f"{func.__qualname__} failed: {e}")
            return failure(str(e), "database_error")
        except psycopg2.Error as e:
            logger.error(f"{func.__qualname__} database error: {type(e).__name__}: {e}")
            return failure("Database error", "database_error")

    return wrapper
