"""Cross-reference resolution.

Turns a Reference met while resolving a field into a freshly fetched
entity: the federation gate is checked first, then the connector
operation matching the reference kind is called.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Sequence

from graphql import FieldNode, FragmentDefinitionNode

from ..connectors.base import ConnectorError, DatabaseConnector, NotFoundError
from ..entities.types import Entity, RefKind, Reference
from ..errors import AuthorizationError, SchemaInconsistencyError
from ..federation.gate import Denied, evaluate
from ..federation.peer import ForwardedQuery, PeerClient, PeerError, build_forwarded_query
from .reprojection import get_field_sub_query


logger = logging.getLogger(__name__)


class CrossRefResolver:
    """
    Resolves references for the field resolvers of the schema.

    Holds no per-query state; every call is a fresh read through the
    connector. Repeated references to the same id are fetched again.
    """

    def __init__(
        self,
        connector: DatabaseConnector,
        host_address: str,
        peer: PeerClient | None = None,
    ):
        self.connector = connector
        self.host_address = host_address
        self.peer = peer
        self._dispatch: dict[RefKind, Callable[[str], Awaitable[Entity]]] = {
            RefKind.THING: connector.get_thing,
            RefKind.ACTION: connector.get_action,
            RefKind.KEY: connector.get_key,
        }

    async def resolve(
        self,
        ref: Reference,
        field_nodes: Sequence[FieldNode] = (),
        fragments: Mapping[str, FragmentDefinitionNode] | None = None,
    ) -> Entity:
        """
        Resolve a reference to the entity it points at.

        Args:
            ref: The reference to resolve
            field_nodes: Selection that asked for the reference field
            fragments: Named fragments of the query document

        Raises:
            AuthorizationError: If the reference belongs to another node
            SchemaInconsistencyError: If the reference kind is unknown
            ConnectorError: If the connector fails (incl. NotFoundError)
        """
        decision = evaluate(ref.location, self.host_address)
        if isinstance(decision, Denied):
            logger.warning(f"Denied cross-reference to {ref.kind_name} '{ref.id}' at {ref.location!r}")
            forwarded = self.forwarded_query(ref, field_nodes, fragments)
            logger.debug(f"Query not forwarded to {forwarded.host}: {forwarded.query}")
            raise AuthorizationError(decision.reason)

        fetch = self._dispatch.get(ref.kind)
        if fetch is None:
            raise SchemaInconsistencyError(f"can't resolve the given type '{ref.kind_name}'")

        logger.debug(f"Resolving {ref.kind_name} '{ref.id}'")
        return await fetch(ref.id)

    def forwarded_query(
        self,
        ref: Reference,
        field_nodes: Sequence[FieldNode],
        fragments: Mapping[str, FragmentDefinitionNode] | None = None,
    ) -> ForwardedQuery:
        """Build the query that would fetch ``ref`` from its owning node."""
        return build_forwarded_query(ref, get_field_sub_query(field_nodes, fragments))

    async def forward(
        self,
        ref: Reference,
        field_nodes: Sequence[FieldNode],
        fragments: Mapping[str, FragmentDefinitionNode] | None = None,
    ) -> dict[str, Any]:
        """
        Fetch ``ref`` from its owning node through the peer client.

        The gate never allows remote origins today, so resolve() does not
        call this; it is the entry point for federated resolution.

        Returns:
            The peer's projection of the entity, shaped like the selection

        Raises:
            PeerError: If no peer client is configured or the request fails
            ConnectorError: If the peer reports an error for the entity
        """
        if self.peer is None:
            raise PeerError("No peer client configured")

        forwarded = self.forwarded_query(ref, field_nodes, fragments)
        body = await self.peer.forward(forwarded)

        errors = body.get("errors")
        if errors:
            raise ConnectorError(f"Peer {forwarded.host} reported: {errors[0].get('message')}")

        data = (body.get("data") or {}).get(forwarded.root_field)
        if data is None:
            raise NotFoundError(f"{ref.kind_name} '{ref.id}' not found on {forwarded.host}")
        return data
