"""
Storage session shared by every repository of one unit of work.

Staged inserts and deletes live in a ``ChangeSet`` until the owning unit of
work commits; the SQLAlchemy session is only touched by lookups, queries
and the commit itself.
"""

from typing import Any, Dict, List, Optional, Tuple, Type
from sqlalchemy import inspect as sa_inspect
from framework.exceptions import DisposedError, DuplicateKeyError, NotTrackedError
from .identity import identity_of


class ChangeSet:
    """Pending inserts and deletes, kept in staging order."""

    def __init__(self):
        self._added: Dict[int, Any] = {}
        self._added_keys: Dict[Tuple[Type, Tuple[Any, ...]], Any] = {}
        self._removed: Dict[int, Any] = {}

    def __len__(self) -> int:
        return len(self._added) + len(self._removed)

    def __bool__(self) -> bool:
        return bool(self._added or self._removed)

    @property
    def added(self) -> List[Any]:
        return list(self._added.values())

    @property
    def removed(self) -> List[Any]:
        return list(self._removed.values())

    def stage_add(self, entity: Any) -> bool:
        """Stage an insert; returns False when it only cancels a staged delete."""
        if id(entity) in self._removed:
            del self._removed[id(entity)]
            return False

        key = identity_of(entity)
        if id(entity) in self._added or (key is not None and (type(entity), key) in self._added_keys):
            raise DuplicateKeyError(
                f"{type(entity).__name__} with key {key} is already staged for insertion",
                detail={"model": type(entity).__name__, "key": key},
            )

        self._added[id(entity)] = entity
        if key is not None:
            self._added_keys[(type(entity), key)] = entity
        return True

    def cancel_add(self, entity: Any) -> bool:
        """Drop a staged insert of this exact instance; False if none was staged."""
        if self._added.pop(id(entity), None) is None:
            return False
        key = identity_of(entity)
        if key is not None:
            self._added_keys.pop((type(entity), key), None)
        return True

    def is_removal_staged(self, entity: Any) -> bool:
        return id(entity) in self._removed

    def stage_remove(self, entity: Any) -> None:
        self._removed.setdefault(id(entity), entity)

    def staged_insert(self, model: Type, key: Tuple[Any, ...]) -> Optional[Any]:
        return self._added_keys.get((model, key))

    def is_staged_for_removal(self, model: Type, key: Tuple[Any, ...]) -> bool:
        return any(
            type(entity) is model and identity_of(entity) == key
            for entity in self._removed.values()
        )

    def clear(self) -> None:
        self._added.clear()
        self._added_keys.clear()
        self._removed.clear()


class StoreSession:
    """Non-owning handle to the store session of one unit of work."""

    def __init__(self, session: Any, owner_id: str):
        self._session = session
        self.owner_id = owner_id
        self.changes = ChangeSet()
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def session(self) -> Any:
        self.ensure_open()
        return self._session

    def ensure_open(self) -> None:
        if self._released:
            raise DisposedError(f"Unit of work {self.owner_id} has released its session")

    def stage_add(self, entity: Any) -> bool:
        self.ensure_open()
        if not self.changes.is_removal_staged(entity) and sa_inspect(entity).persistent:
            # Already stored under this key; re-adding would not insert anything
            raise DuplicateKeyError(
                f"{type(entity).__name__} with key {identity_of(entity)} already exists in the store",
                detail={"model": type(entity).__name__, "key": identity_of(entity)},
            )
        return self.changes.stage_add(entity)

    def stage_remove(self, entity: Any) -> None:
        self.ensure_open()
        if self.changes.cancel_add(entity):
            return
        if entity not in self._session:
            raise NotTrackedError(
                f"{type(entity).__name__} with key {identity_of(entity)} is not tracked by unit of work {self.owner_id}",
                detail={"model": type(entity).__name__, "key": identity_of(entity)},
            )
        self.changes.stage_remove(entity)

    def release(self) -> Any:
        """Mark released and hand back the raw session for closing."""
        self._released = True
        self.changes.clear()
        return self._session
