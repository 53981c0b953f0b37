from .errors import (
    DataAccessException,
    DisposedError,
    DuplicateKeyError,
    NotTrackedError,
    StoreError,
)

__all__ = [
    "DataAccessException",
    "DisposedError",
    "DuplicateKeyError",
    "NotTrackedError",
    "StoreError",
]
