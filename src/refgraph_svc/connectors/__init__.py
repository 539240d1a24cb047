"""Database connectors."""

from .base import ConnectorError, DatabaseConnector, NotFoundError
from .loader import SeedLoader, load_seed_data
from .memory import InMemoryConnector
from .registry import ConnectorRegistry, default_registry

__all__ = [
    "ConnectorError",
    "DatabaseConnector",
    "NotFoundError",
    "InMemoryConnector",
    "SeedLoader",
    "load_seed_data",
    "ConnectorRegistry",
    "default_registry",
]
