"""Base connector interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..entities.types import Action, Key, Thing


class ConnectorError(Exception):
    """Base exception for connector errors."""
    code = "CONNECTOR_ERROR"

    @property
    def extensions(self) -> dict[str, str]:
        return {"code": self.code}


class NotFoundError(ConnectorError):
    """Raised when the requested identifier does not exist."""
    code = "NOT_FOUND"


class DatabaseConnector(ABC):
    """
    Abstract base class for database connectors.

    This is the only way the resolution engine touches storage. Each fetch
    returns a fully populated entity or raises; partial population is not
    a valid success state. Retries and caching, if wanted, belong to the
    connector implementation.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Connector type name, as used in configuration."""
        ...

    @abstractmethod
    async def get_thing(self, uuid: str) -> Thing:
        """
        Fetch a thing by id.

        Raises:
            NotFoundError: If no thing has this id
            ConnectorError: On storage failure
        """
        ...

    @abstractmethod
    async def get_action(self, uuid: str) -> Action:
        """Fetch an action by id."""
        ...

    @abstractmethod
    async def get_key(self, uuid: str) -> Key:
        """Fetch a key by id."""
        ...

    async def health_check(self) -> bool:
        """
        Check if the storage backend is reachable.

        Default returns True. Override for actual health checks.
        """
        return True
