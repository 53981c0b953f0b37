"""
Repository pattern: data access abstraction, decouples application code from the store session.
"""

from .base import AsyncBaseRepository, BaseRepository, IAsyncRepository, IRepository
from .session import ChangeSet, StoreSession
from .unit_of_work import AsyncUnitOfWork, IAsyncUnitOfWork, IUnitOfWork, UnitOfWork, UnitOfWorkState

__all__ = [
    "AsyncBaseRepository",
    "AsyncUnitOfWork",
    "BaseRepository",
    "ChangeSet",
    "IAsyncRepository",
    "IAsyncUnitOfWork",
    "IRepository",
    "IUnitOfWork",
    "StoreSession",
    "UnitOfWork",
    "UnitOfWorkState",
]
