"""
Unit of Work: owns one store session, the repositories built on it and the
single commit that persists their staged changes.

State machine: OPEN -> COMMITTED (session stays usable) -> DISPOSED (terminal).
A failed commit rolls the store session back, keeps the staged changes and
leaves the unit of work OPEN so the caller can fix and retry, or dispose.
"""

import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.exceptions import DisposedError, StoreError
from framework.logging.logger import get_logger
from .session import StoreSession


class UnitOfWorkState(str, Enum):
    """Unit of work lifecycle state."""
    OPEN = "OPEN"
    COMMITTED = "COMMITTED"
    DISPOSED = "DISPOSED"


class IUnitOfWork(ABC):
    """Unit of work contract (sync commit)."""

    @abstractmethod
    def commit(self) -> int:
        """Persist all staged changes; returns the number of affected entities."""
        pass

    @abstractmethod
    def dispose(self) -> None:
        """Release the session."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()


class IAsyncUnitOfWork(ABC):
    """Unit of work contract (awaitable commit)."""

    @abstractmethod
    async def commit(self) -> int:
        pass

    @abstractmethod
    async def dispose(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.dispose()


class _UnitOfWorkCore:
    """State, repository cache and change bookkeeping shared by both variants."""
    session_type: type = Session

    def __init__(self, session: Any):
        if session is None:
            raise ValueError("Session must be provided. Pass session_factory or session explicitly.")
        if not isinstance(session, self.session_type):
            raise TypeError(
                f"{type(self).__name__} requires a {self.session_type.__name__}, got {type(session).__name__}"
            )

        self.id = uuid.uuid4().hex[:8]
        self._store = StoreSession(session, owner_id=self.id)
        self._repositories: Dict[tuple, Any] = {}
        self._committed = False
        self.logger = get_logger("unit_of_work", trace_id=self.id)
        self.logger.debug(f"{type(self).__name__} opened")

    @property
    def state(self) -> UnitOfWorkState:
        if self._store.released:
            return UnitOfWorkState.DISPOSED
        if self._committed and not self._store.changes:
            return UnitOfWorkState.COMMITTED
        return UnitOfWorkState.OPEN

    @property
    def store(self) -> StoreSession:
        """Shared store session handed to repositories."""
        return self._store

    @property
    def session(self):
        return self._store.session

    @property
    def pending_changes(self) -> int:
        self._ensure_open()
        return len(self._store.changes)

    def _ensure_open(self) -> None:
        if self._store.released:
            raise DisposedError(f"Unit of work {self.id} is disposed")

    def get_repository(self, repo_class, model_class=None):
        """Get or create a repository instance bound to this unit of work (cached)."""
        self._ensure_open()
        cache_key = (repo_class, model_class)
        if cache_key not in self._repositories:
            if model_class is None:
                self._repositories[cache_key] = repo_class(self._store)
            else:
                self._repositories[cache_key] = repo_class(self._store, model_class)
        return self._repositories[cache_key]

    def _stage_flush(self, session) -> int:
        """Move staged inserts into the store session; deletes are issued by the caller."""
        changes = self._store.changes
        session.add_all(changes.added)
        return len(changes)

    def _commit_succeeded(self, count: int) -> int:
        self._store.changes.clear()
        self._committed = True
        self.logger.info(f"Committed {count} change(s)")
        return count

    def _commit_failed(self, exc: SQLAlchemyError) -> StoreError:
        self._committed = False
        self.logger.error(f"Commit failed, {len(self._store.changes)} change(s) kept staged: {exc}")
        return StoreError(f"Commit failed: {exc}", detail={"unit_of_work": self.id})

    def _release(self):
        """Mark the store session released; None when already disposed."""
        if self._store.released:
            return None
        discarded = len(self._store.changes)
        session = self._store.release()
        self._repositories.clear()
        if discarded:
            self.logger.warning(f"Disposed with {discarded} uncommitted change(s) discarded")
        else:
            self.logger.debug("Disposed")
        return session


class UnitOfWork(_UnitOfWorkCore, IUnitOfWork):
    """Manages related repositories with a shared sync session and one commit."""

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        session: Optional[Session] = None,
    ):
        """Acquire a session from session_factory (default: the process database), or adopt session."""
        if session_factory is not None and session is not None:
            raise ValueError("Pass either session_factory or session, not both.")
        if session is None:
            if session_factory is None:
                from framework.database.manager import DatabaseManager
                session_factory = DatabaseManager.get_instance().sql.session_factory
            session = session_factory()
        super().__init__(session)

    @classmethod
    def from_session(cls, session: Session) -> "UnitOfWork":
        """Create UnitOfWork that takes ownership of an existing session."""
        return cls(session=session)

    def commit(self) -> int:
        """Flush the whole change set (inserts before deletes) and commit it."""
        self._ensure_open()
        session = self._store.session
        try:
            count = self._stage_flush(session)
            for entity in self._store.changes.removed:
                session.delete(entity)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise self._commit_failed(e) from e
        return self._commit_succeeded(count)

    def rollback(self) -> None:
        """Discard staged changes and roll back the store transaction."""
        self._ensure_open()
        self._store.changes.clear()
        self._store.session.rollback()

    def dispose(self) -> None:
        """Release the session; further calls are no-ops."""
        session = self._release()
        if session is not None:
            session.close()


class AsyncUnitOfWork(_UnitOfWorkCore, IAsyncUnitOfWork):
    """Manages related repositories with a shared async session and one commit."""
    session_type = AsyncSession

    def __init__(
        self,
        session_factory: Optional[Callable[[], AsyncSession]] = None,
        session: Optional[AsyncSession] = None,
    ):
        if session_factory is not None and session is not None:
            raise ValueError("Pass either session_factory or session, not both.")
        if session is None:
            if session_factory is None:
                from framework.database.manager import DatabaseManager
                session_factory = DatabaseManager.get_instance().sql.async_session_factory
            session = session_factory()
        super().__init__(session)

    @classmethod
    async def from_session(cls, session: AsyncSession) -> "AsyncUnitOfWork":
        """Create AsyncUnitOfWork from an existing session."""
        return cls(session=session)

    async def commit(self) -> int:
        self._ensure_open()
        session = self._store.session
        try:
            count = self._stage_flush(session)
            for entity in self._store.changes.removed:
                await session.delete(entity)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise self._commit_failed(e) from e
        return self._commit_succeeded(count)

    async def rollback(self) -> None:
        self._ensure_open()
        self._store.changes.clear()
        await self._store.session.rollback()

    async def dispose(self) -> None:
        session = self._release()
        if session is not None:
            await session.close()
