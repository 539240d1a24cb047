"""Resolution error hierarchy.

Every error carries a stable ``code``. graphql-core copies the
``extensions`` dict of the original exception onto the reported error,
so clients see ``{"code": ...}`` next to the message.
"""

from __future__ import annotations

from typing import Any

from .connectors.base import ConnectorError, NotFoundError


class ResolutionError(Exception):
    """Base class for errors raised while resolving a query."""
    code = "RESOLUTION_ERROR"

    @property
    def extensions(self) -> dict[str, Any]:
        return {"code": self.code}


class AuthorizationError(ResolutionError):
    """Raised when the federation gate denies a cross-node reference."""
    code = "UNAUTHORIZED"


class SchemaInconsistencyError(ResolutionError):
    """Raised when a reference or source value does not fit the schema."""
    code = "SCHEMA_INCONSISTENCY"


class QueryTimeoutError(ResolutionError):
    """Raised when a query exceeds its deadline."""
    code = "TIMEOUT"

    def __init__(self, message: str, timeout_seconds: float | None = None):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds


__all__ = [
    "ResolutionError",
    "AuthorizationError",
    "SchemaInconsistencyError",
    "QueryTimeoutError",
    "ConnectorError",
    "NotFoundError",
]
