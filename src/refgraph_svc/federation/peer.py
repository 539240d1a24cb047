"""Peer forwarding - builds and sends queries to the node that owns a reference."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..entities.types import Reference


logger = logging.getLogger(__name__)


class PeerError(Exception):
    """Raised when a request to a peer node fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class ForwardedQuery:
    """A query that asks a peer for the entity behind a reference."""
    host: str
    query: str
    root_field: str

    def payload(self) -> dict[str, Any]:
        return {"query": self.query}


def build_forwarded_query(ref: Reference, sub_query: str) -> ForwardedQuery:
    """
    Build the query that fetches ``ref`` from its owning node.

    ``sub_query`` is the reprojected field list the client asked for on the
    reference field, so the peer returns exactly the same shape.
    """
    root_field = ref.kind_name.lower()
    # JSON string escaping is valid GraphQL string syntax
    query = f"{{ {root_field}(id: {json.dumps(ref.id)}) {{{sub_query}}} }}"
    return ForwardedQuery(host=ref.location or "", query=query, root_field=root_field)


@dataclass
class PeerClient:
    """
    Client for the GraphQL endpoint of another node.

    Usage:
        client = PeerClient(api_key="...")
        body = await client.query("node-b:8060", "{ thing(id: \\"T1\\") { uuid } }")
    """
    api_key: str | None = None
    timeout_seconds: float = 30.0
    scheme: str = "http"

    # Optional transport override (tests use httpx.MockTransport)
    transport: httpx.AsyncBaseTransport | None = None

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return headers

    async def post(self, host: str, endpoint: str, payload: Any) -> Any:
        """POST a JSON payload to a peer and return the decoded JSON body."""
        url = f"{self.scheme}://{host}/{endpoint.lstrip('/')}"
        logger.debug(f"POST {url}")

        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
            try:
                response = await client.post(url, json=payload, headers=self._headers())
            except httpx.HTTPError as e:
                raise PeerError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise PeerError(
                f"Peer {host} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise PeerError(f"Peer {host} returned invalid JSON: {e}") from e

    async def query(
        self,
        host: str,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> dict[str, Any]:
        """Run a single GraphQL query on a peer."""
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        if operation_name:
            payload["operationName"] = operation_name
        return await self.post(host, "graphql", payload)

    async def batch(self, host: str, requests: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Run several GraphQL queries on a peer in one round trip."""
        return await self.post(host, "graphql/batch", requests)

    async def forward(self, forwarded: ForwardedQuery) -> dict[str, Any]:
        """Send a forwarded query and return the full response body."""
        if not forwarded.host:
            raise PeerError("Forwarded query has no target host")
        body = await self.query(forwarded.host, forwarded.query)
        if not isinstance(body, dict):
            raise PeerError(f"Peer {forwarded.host} returned a {type(body).__name__} instead of a GraphQL response")
        return body
