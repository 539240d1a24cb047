"""Seed data loader - fills an in-memory connector from YAML/JSON files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..entities.types import Action, EntityParseError, Key, Thing
from .base import ConnectorError
from .memory import InMemoryConnector


logger = logging.getLogger(__name__)


class SeedLoader:
    """
    Loads entities from YAML or JSON seed files.

    File format:
    ```yaml
    keys:
      K1:
        token: 6a1f...
        email: owner@example.com
        read: true
        parent: {kind: Key, id: K0, location: "localhost:8060"}

    things:
      T1:
        at_context: http://schema.org
        at_class: Person
        creation_time_unix: 1514764800
        key: {kind: Key, id: K1, location: "localhost:8060"}

    actions:
      A1:
        at_context: http://schema.org
        at_class: Follow
        creation_time_unix: 1514764800
        key: {kind: Key, id: K1, location: "localhost:8060"}
        things:
          object: {kind: Thing, id: T1, location: "localhost:8060"}
          subject: {kind: Thing, id: T2, location: "localhost:8060"}
    ```
    """

    def load_file(self, path: str | Path) -> InMemoryConnector:
        """Load entities from a YAML or JSON file."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Seed file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                import json
                data = json.load(f)

        return self.load_dict(data or {})

    def load_dict(self, data: dict[str, Any], connector: InMemoryConnector | None = None) -> InMemoryConnector:
        """Load entities from a dictionary into a (new) connector."""
        connector = connector if connector is not None else InMemoryConnector()

        try:
            for uuid, record in (data.get("keys") or {}).items():
                connector.add(Key.from_dict(str(uuid), record))
            for uuid, record in (data.get("things") or {}).items():
                connector.add(Thing.from_dict(str(uuid), record))
            for uuid, record in (data.get("actions") or {}).items():
                connector.add(Action.from_dict(str(uuid), record))
        except EntityParseError as e:
            raise ConnectorError(f"Invalid seed data: {e}") from e

        logger.info(
            f"Loaded {len(connector.keys)} keys, {len(connector.things)} things, "
            f"{len(connector.actions)} actions"
        )
        return connector


def load_seed_data(path: str | Path) -> InMemoryConnector:
    """Convenience function to load a seed file."""
    return SeedLoader().load_file(path)
