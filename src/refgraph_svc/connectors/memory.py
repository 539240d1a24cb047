"""In-memory connector (for tests, demos and seeded single-node deployments)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..entities.types import Action, Entity, Key, RefKind, Thing, entity_kind
from .base import DatabaseConnector, NotFoundError


logger = logging.getLogger(__name__)


@dataclass
class InMemoryConnector(DatabaseConnector):
    """
    Connector backed by plain dictionaries.

    Entities are immutable, so handing out the stored instance is
    equivalent to a fresh read.
    """
    things: dict[str, Thing] = field(default_factory=dict)
    actions: dict[str, Action] = field(default_factory=dict)
    keys: dict[str, Key] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return "memory"

    def add(self, entity: Entity) -> None:
        """Store an entity under its kind and id."""
        kind = entity_kind(entity)
        if kind == RefKind.THING:
            self.things[entity.uuid] = entity
        elif kind == RefKind.ACTION:
            self.actions[entity.uuid] = entity
        else:
            self.keys[entity.uuid] = entity

    def add_all(self, entities: list[Entity]) -> None:
        for entity in entities:
            self.add(entity)

    def __len__(self) -> int:
        return len(self.things) + len(self.actions) + len(self.keys)

    async def get_thing(self, uuid: str) -> Thing:
        return self._lookup(self.things, RefKind.THING, uuid)

    async def get_action(self, uuid: str) -> Action:
        return self._lookup(self.actions, RefKind.ACTION, uuid)

    async def get_key(self, uuid: str) -> Key:
        return self._lookup(self.keys, RefKind.KEY, uuid)

    def _lookup(self, store: dict, kind: RefKind, uuid: str):
        entity = store.get(uuid)
        if entity is None:
            logger.debug(f"{kind.value} not found: {uuid}")
            raise NotFoundError(f"{kind.value} '{uuid}' not found")
        return entity
