"""Core service layer - executes GraphQL queries against the schema.

Flow:
1. Client POSTs a query to /graphql (or several to /graphql/batch)
2. Service executes it with graphql-core; sibling fields resolve concurrently
3. Root fields fetch through the connector, reference fields go through
   the federation gate and the connector again
4. Field errors are reported next to whatever data did resolve
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from graphql import ExecutionResult, GraphQLSchema, graphql

from .config import Config
from .connectors.base import DatabaseConnector
from .connectors.registry import ConnectorRegistry, default_registry
from .errors import QueryTimeoutError
from .federation.peer import PeerClient
from .schema.builder import build_schema


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryRequest:
    """A single GraphQL request."""
    query: str
    variables: dict[str, Any] | None = None
    operation_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QueryRequest:
        return cls(
            query=data.get("query", ""),
            variables=data.get("variables"),
            operation_name=data.get("operationName"),
        )


@dataclass
class GraphService:
    """
    GraphQL query service.

    Owns no entity state: every query is a fresh read through the
    connector, and nothing is cached between or within queries.
    """
    schema: GraphQLSchema
    config: Config
    connector: DatabaseConnector

    # Stats
    _queries: int = field(default=0, init=False)
    _errors: int = field(default=0, init=False)

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> ExecutionResult:
        """
        Execute one query.

        Field errors are part of the result. Only a missed deadline raises.

        Raises:
            QueryTimeoutError: If the query exceeds graphql.query_timeout_seconds
        """
        start = time.perf_counter()
        timeout = self.config.graphql.query_timeout_seconds or None

        execution = graphql(
            self.schema,
            query,
            variable_values=variables,
            operation_name=operation_name,
        )
        try:
            # Cancels in-flight connector calls when the deadline passes
            result = await asyncio.wait_for(execution, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Query exceeded deadline of {timeout}s")
            raise QueryTimeoutError(
                f"Query exceeded deadline of {timeout}s",
                timeout_seconds=timeout,
            ) from None

        self._queries += 1
        if result.errors:
            self._errors += 1
            for error in result.errors:
                logger.warning(f"Field error at {error.path}: {error.message}")

        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Query executed in {latency_ms:.1f}ms")
        return result

    async def execute_request(self, request: QueryRequest) -> ExecutionResult:
        return await self.execute(request.query, request.variables, request.operation_name)

    async def execute_batch(self, requests: list[QueryRequest]) -> list[ExecutionResult]:
        """
        Execute several independent queries.

        Results are returned in request order; field errors in one query do not
        affect the others.
        """
        return list(await asyncio.gather(*(self.execute_request(r) for r in requests)))

    @property
    def stats(self) -> dict[str, Any]:
        return {
            "queries": self._queries,
            "queries_with_errors": self._errors,
        }


def create_peer_client(config: Config) -> PeerClient:
    """Create the client used for requests to peer nodes."""
    return PeerClient(
        api_key=config.peer.api_key,
        timeout_seconds=config.peer.timeout_seconds,
        scheme=config.peer.scheme,
    )


def create_service(
    config: Config,
    connector: DatabaseConnector | None = None,
    registry: ConnectorRegistry | None = None,
) -> GraphService:
    """Wire connector, schema and peer client into a service."""
    if connector is None:
        connector = (registry or default_registry()).create(config.connector)

    schema = build_schema(
        connector,
        config.node.host_address,
        strict_sources=config.graphql.strict_sources,
        peer=create_peer_client(config),
    )
    logger.info(f"Serving node {config.node.host_address}")
    return GraphService(schema=schema, config=config, connector=connector)
