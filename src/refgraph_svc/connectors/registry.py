"""Connector registry - maps connector type names to factories."""

from __future__ import annotations

import logging
from typing import Callable

from ..config import ConnectorConfig
from .base import ConnectorError, DatabaseConnector
from .loader import SeedLoader
from .memory import InMemoryConnector


logger = logging.getLogger(__name__)

ConnectorFactory = Callable[[ConnectorConfig], DatabaseConnector]


def _memory_factory(config: ConnectorConfig) -> DatabaseConnector:
    if config.seed_file:
        return SeedLoader().load_file(config.seed_file)
    return InMemoryConnector()


class ConnectorRegistry:
    """
    Registry of connector factories by type name.

    Factories are registered at startup; the configured connector is
    built once per process.
    """

    def __init__(self):
        self._factories: dict[str, ConnectorFactory] = {}

    def register(self, name: str, factory: ConnectorFactory) -> None:
        """Register a factory for a connector type."""
        self._factories[name] = factory

    def has(self, name: str) -> bool:
        """Check if a factory is registered for a type."""
        return name in self._factories

    def all_types(self) -> list[str]:
        """Get all registered connector types."""
        return list(self._factories.keys())

    def create(self, config: ConnectorConfig) -> DatabaseConnector:
        """
        Build the connector described by config.

        Raises:
            ConnectorError: If no factory is registered for the type
        """
        factory = self._factories.get(config.type)
        if factory is None:
            raise ConnectorError(
                f"No connector registered for type: {config.type}"
            )
        connector = factory(config)
        logger.info(f"Using '{connector.name}' database connector")
        return connector


def default_registry() -> ConnectorRegistry:
    """Registry with the built-in connectors."""
    registry = ConnectorRegistry()
    registry.register("memory", _memory_factory)
    return registry
