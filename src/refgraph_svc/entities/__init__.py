"""Entity contracts and types."""

from .types import (
    Action,
    Entity,
    EntityParseError,
    Identifiable,
    Key,
    ObjectSubject,
    RefKind,
    Reference,
    SchemaObject,
    Thing,
    entity_kind,
)

__all__ = [
    "Action",
    "Entity",
    "EntityParseError",
    "Identifiable",
    "Key",
    "ObjectSubject",
    "RefKind",
    "Reference",
    "SchemaObject",
    "Thing",
    "entity_kind",
]
