"""
Repository abstract base classes and generic implementations.

Repositories hold no data: lookups and queries go through the shared store
session, and mutations are only staged on its change set. Nothing is written
until the owning unit of work commits.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Generic, Iterable, Iterator, List, Optional, Type, TypeVar
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, select
from framework.exceptions import StoreError
from framework.logging.logger import get_logger
from .identity import normalize_key, primary_key_names, store_key
from .paging import apply_paging
from .session import StoreSession

T = TypeVar("T", bound=SQLModel)


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    def find(self, *key: Any) -> Optional[T]:
        """Get entity by identity key."""
        pass

    @abstractmethod
    def find_where(self, *criteria: Any, page: Optional[int] = None, page_size: Optional[int] = None) -> Iterator[T]:
        """Query entities matching criteria (evaluated by the store)."""
        pass

    @abstractmethod
    def add(self, entity: T) -> T:
        """Stage entity for insertion."""
        pass

    @abstractmethod
    def add_range(self, entities: Iterable[T]) -> List[T]:
        """Stage entities for insertion."""
        pass

    @abstractmethod
    def remove(self, entity: T) -> None:
        """Stage entity for deletion."""
        pass

    @abstractmethod
    def remove_range(self, entities: Iterable[T]) -> None:
        """Stage entities for deletion."""
        pass


class IAsyncRepository(ABC, Generic[T]):
    """Awaitable variant of IRepository; staging stays synchronous."""

    @abstractmethod
    async def find(self, *key: Any) -> Optional[T]:
        pass

    @abstractmethod
    async def find_where(self, *criteria: Any, page: Optional[int] = None, page_size: Optional[int] = None) -> Iterator[T]:
        pass

    @abstractmethod
    def add(self, entity: T) -> T:
        pass

    @abstractmethod
    def add_range(self, entities: Iterable[T]) -> List[T]:
        pass

    @abstractmethod
    def remove(self, entity: T) -> None:
        pass

    @abstractmethod
    def remove_range(self, entities: Iterable[T]) -> None:
        pass


class _RepositoryCore(Generic[T]):
    """Staging and statement building shared by the sync and async repositories."""

    def __init__(self, store: StoreSession, model: Type[T]):
        """Bind repository to a live store session and a model."""
        store.ensure_open()
        self.store = store
        self.model = model
        self.logger = get_logger(f"repository.{model.__name__}", trace_id=store.owner_id)

    @property
    def session(self):
        return self.store.session

    def _staged_lookup(self, key: tuple):
        """Resolve key against the change set: (handled, entity_or_key)."""
        self.store.ensure_open()
        key = normalize_key(self.model, key)
        staged = self.store.changes.staged_insert(self.model, key)
        if staged is not None:
            return True, staged
        if self.store.changes.is_staged_for_removal(self.model, key):
            return True, None
        return False, key

    def _order_by(self):
        return [getattr(self.model, name) for name in primary_key_names(self.model)]

    def _filters(self, filters: dict) -> list:
        criteria = []
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"{self.model.__name__} has no attribute '{key}'")
            criteria.append(getattr(self.model, key) == value)
        return criteria

    def _select(self, criteria, page: Optional[int] = None, page_size: Optional[int] = None):
        statement = select(self.model)
        if criteria:
            statement = statement.where(*criteria)
        return apply_paging(statement, self._order_by(), page, page_size)

    def _count_statement(self, criteria):
        statement = select(func.count()).select_from(self.model)
        if criteria:
            statement = statement.where(*criteria)
        return statement

    def _check_model(self, entity: Any) -> None:
        if not isinstance(entity, self.model):
            raise TypeError(
                f"{type(self).__name__} stores {self.model.__name__}, got {type(entity).__name__}"
            )

    def _store_failure(self, exc: SQLAlchemyError) -> StoreError:
        self.logger.error(f"Query on {self.model.__name__} failed: {exc}")
        return StoreError(f"Query failed: {exc}", detail={"model": self.model.__name__})

    def add(self, entity: T) -> T:
        """Stage entity for insertion (no write until commit)."""
        self._check_model(entity)
        if self.store.stage_add(entity):
            self.logger.debug(f"Staged insert of {self.model.__name__}")
        return entity

    def add_range(self, entities: Iterable[T]) -> List[T]:
        staged = []
        for entity in entities:
            staged.append(self.add(entity))
        return staged

    def remove(self, entity: T) -> None:
        """Stage entity for deletion; it must be known to the session."""
        self._check_model(entity)
        self.store.stage_remove(entity)
        self.logger.debug(f"Staged delete of {self.model.__name__}")

    def remove_range(self, entities: Iterable[T]) -> None:
        for entity in entities:
            self.remove(entity)


class BaseRepository(_RepositoryCore[T], IRepository[T]):
    """Generic repository over a sync SQLModel session; subclasses add domain queries."""

    def _execute(self, operation: Callable[[], Any]) -> Any:
        """Run a store call; SQLAlchemy failures surface as StoreError."""
        try:
            return operation()
        except SQLAlchemyError as e:
            raise self._store_failure(e) from e

    def _fetch_all(self, statement) -> List[Any]:
        return self._execute(lambda: list(self.session.exec(statement).all()))

    def _iterate(self, result) -> Iterator[T]:
        try:
            yield from result
        except SQLAlchemyError as e:
            raise self._store_failure(e) from e

    def find(self, *key: Any) -> Optional[T]:
        """Get entity by key; staged instances win over the store."""
        handled, found = self._staged_lookup(key)
        if handled:
            return found
        return self._execute(lambda: self.session.get(self.model, store_key(found)))

    def find_where(self, *criteria: Any, page: Optional[int] = None, page_size: Optional[int] = None) -> Iterator[T]:
        """
        Query entities matching SQLAlchemy criteria.

        Returns a one-shot iterator over the store result, ordered by identity
        key. Staged (uncommitted) inserts are not part of the result.
        """
        statement = self._select(criteria, page, page_size)
        result = self._execute(lambda: self.session.exec(statement))
        return self._iterate(result)

    def find_one(self, **filters) -> Optional[T]:
        """Find one entity by filters (e.g. name='Gamma')."""
        statement = self._select(self._filters(filters))
        return self._execute(lambda: self.session.exec(statement).first())

    def count(self, *criteria: Any, **filters) -> int:
        """Count persisted entities matching criteria/filters."""
        statement = self._count_statement(list(criteria) + self._filters(filters))
        return self._execute(lambda: self.session.exec(statement).one())


class AsyncBaseRepository(_RepositoryCore[T], IAsyncRepository[T]):
    """Generic repository over an async SQLModel session."""

    async def _execute(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await operation()
        except SQLAlchemyError as e:
            raise self._store_failure(e) from e

    async def _fetch_all(self, statement) -> List[Any]:
        async def fetch():
            result = await self.session.exec(statement)
            return list(result.all())
        return await self._execute(fetch)

    async def find(self, *key: Any) -> Optional[T]:
        handled, found = self._staged_lookup(key)
        if handled:
            return found
        return await self._execute(lambda: self.session.get(self.model, store_key(found)))

    async def find_where(self, *criteria: Any, page: Optional[int] = None, page_size: Optional[int] = None) -> Iterator[T]:
        """Same contract as BaseRepository.find_where; rows are buffered by the driver."""
        statement = self._select(criteria, page, page_size)
        result = await self._execute(lambda: self.session.exec(statement))
        return iter(result)

    async def find_one(self, **filters) -> Optional[T]:
        statement = self._select(self._filters(filters))

        async def first():
            result = await self.session.exec(statement)
            return result.first()
        return await self._execute(first)

    async def count(self, *criteria: Any, **filters) -> int:
        statement = self._count_statement(list(criteria) + self._filters(filters))

        async def one():
            result = await self.session.exec(statement)
            return result.one()
        return await self._execute(one)
