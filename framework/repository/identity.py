"""
Identity keys of mapped entities.

An identity key is the ordered tuple of the mapper's primary-key attribute
values. Entities whose key is not assigned yet (autoincrement columns still
``None``) have no identity until the store assigns one.
"""

from typing import Any, Optional, Tuple, Type
from sqlalchemy import inspect as sa_inspect


def primary_key_names(model: Type) -> Tuple[str, ...]:
    """Attribute names forming the model's identity key, in declaration order."""
    mapper = sa_inspect(model)
    return tuple(mapper.get_property_by_column(column).key for column in mapper.primary_key)


def identity_of(entity: Any) -> Optional[Tuple[Any, ...]]:
    """Identity key of an entity, or None while any part of it is unassigned."""
    key = tuple(getattr(entity, name) for name in primary_key_names(type(entity)))
    if any(part is None for part in key):
        return None
    return key


def normalize_key(model: Type, key: Tuple[Any, ...]) -> Tuple[Any, ...]:
    """Validate key shape against the model's identity; accepts (1, 2) or ((1, 2),)."""
    names = primary_key_names(model)
    if len(key) == 1 and isinstance(key[0], tuple):
        key = key[0]
    if len(key) != len(names):
        raise ValueError(
            f"{model.__name__} identity is ({', '.join(names)}); got {len(key)} key value(s)"
        )
    if any(part is None for part in key):
        raise ValueError(f"{model.__name__} identity key cannot contain None")
    return tuple(key)


def store_key(key: Tuple[Any, ...]) -> Any:
    """Key in the form Session.get expects: scalar for single-column keys."""
    return key[0] if len(key) == 1 else key
