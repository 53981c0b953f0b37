"""
Data access error taxonomy.

Errors are raised synchronously to the immediate caller; this layer never
retries or swallows them.
"""

from typing import Any


class DataAccessException(Exception):
    """Base class for repository and unit-of-work errors."""
    code: int = 500

    def __init__(self, message: str, code: int = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.detail = detail


class DuplicateKeyError(DataAccessException):
    """An entity with the same identity key is already staged for insertion."""
    code = 409


class NotTrackedError(DataAccessException):
    """Removal staged for an entity the session does not know about."""
    code = 404


class DisposedError(DataAccessException):
    """Operation attempted after the owning unit of work released its session."""
    code = 410


class StoreError(DataAccessException):
    """Wraps a failure raised by the underlying store (store exception chained as __cause__)."""
    code = 503
