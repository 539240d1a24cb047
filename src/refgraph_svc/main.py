"""FastAPI application - RefGraph GraphQL Service.

Start with:
    PYTHONPATH=src uvicorn refgraph_svc.main:app --host 0.0.0.0 --port 8060

Set REFGRAPH_CONFIG to a YAML or JSON config file; defaults are used
otherwise.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from graphql import ExecutionResult
from pydantic import BaseModel, Field

from .config import Config
from .errors import QueryTimeoutError, ResolutionError
from .service import GraphService, QueryRequest, create_service


logger = logging.getLogger(__name__)


# Request / response models
class GraphQLRequest(BaseModel):
    """A GraphQL request body."""
    query: str
    variables: dict[str, Any] | None = None
    operationName: str | None = None


class HealthResponse(BaseModel):
    status: str
    node: str
    connector: dict[str, Any]
    queries: dict[str, Any] = Field(default_factory=dict)


# Global service instance (initialized in lifespan)
_service: GraphService | None = None


def load_config() -> Config:
    """Load config from REFGRAPH_CONFIG, or defaults."""
    path = os.environ.get("REFGRAPH_CONFIG")
    if path:
        logger.info(f"Loading config from {path}")
        return Config.from_file(path)
    return Config()


def configure_logging(config: Config) -> None:
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def set_service(service: GraphService | None) -> None:
    """Install the service used by the route handlers."""
    global _service
    _service = service


def get_service() -> GraphService:
    if _service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _service


def to_response(result: ExecutionResult) -> dict[str, Any]:
    """Serialize a result as {"data": ..., "errors": [...]}; errors only when present."""
    return result.formatted


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    config = load_config()
    configure_logging(config)

    logger.info("Starting refgraph service...")
    set_service(create_service(config))
    logger.info("Refgraph service started")

    yield

    logger.info("Refgraph service stopped")
    set_service(None)


router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health():
    """Health check endpoint."""
    service = get_service()
    healthy = await service.connector.health_check()
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        node=service.config.node.host_address,
        connector={"type": service.connector.name, "healthy": healthy},
        queries=service.stats,
    )


@router.post("/graphql", tags=["GraphQL"])
async def graphql_query(body: GraphQLRequest):
    """
    Execute a GraphQL query.

    Field errors (not found, unauthorized cross-references, ...) are
    returned in ``errors`` next to the fields that did resolve.
    """
    service = get_service()
    result = await service.execute(body.query, body.variables, body.operationName)
    return JSONResponse(content=to_response(result))


@router.post("/graphql/batch", tags=["GraphQL"])
async def graphql_batch(body: list[GraphQLRequest]):
    """Execute a batch of GraphQL queries; results keep request order."""
    service = get_service()
    gql_config = service.config.graphql

    if not gql_config.batch_enabled:
        raise HTTPException(status_code=404, detail="Batch queries are disabled")
    if len(body) > gql_config.max_batch_size:
        raise HTTPException(
            status_code=400,
            detail=f"Batch of {len(body)} exceeds maximum of {gql_config.max_batch_size}",
        )

    requests = [
        QueryRequest(query=r.query, variables=r.variables, operation_name=r.operationName)
        for r in body
    ]
    results = await service.execute_batch(requests)
    return JSONResponse(content=[to_response(result) for result in results])


def create_app(service: GraphService | None = None) -> FastAPI:
    """
    Create the FastAPI app.

    With a service, the app uses it directly and skips config loading
    (tests); otherwise the lifespan builds one from config.
    """
    if service is not None:
        set_service(service)

    app = FastAPI(
        title="RefGraph Service",
        description="Read-only GraphQL access to Things, Actions and Keys.",
        version="0.1.0",
        lifespan=None if service is not None else lifespan,
    )
    app.include_router(router)

    @app.exception_handler(QueryTimeoutError)
    async def query_timeout_handler(request: Request, exc: QueryTimeoutError):
        return JSONResponse(
            status_code=504,
            content={"error": "Query timeout", "detail": str(exc)},
        )

    @app.exception_handler(ResolutionError)
    async def resolution_error_handler(request: Request, exc: ResolutionError):
        return JSONResponse(
            status_code=500,
            content={"error": "Resolution error", "detail": str(exc)},
        )

    return app


app = create_app()
