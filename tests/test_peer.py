"""Tests for the peer client and forwarded queries."""

import json

import httpx
import pytest

from refgraph_svc.entities.types import RefKind, Reference
from refgraph_svc.federation.peer import ForwardedQuery, PeerClient, PeerError, build_forwarded_query


def _peer(handler, **kwargs) -> PeerClient:
    return PeerClient(transport=httpx.MockTransport(handler), **kwargs)


class TestBuildForwardedQuery:
    def test_root_field_per_kind(self):
        for kind, root in [(RefKind.THING, "thing"), (RefKind.ACTION, "action"), (RefKind.KEY, "key")]:
            forwarded = build_forwarded_query(Reference(kind=kind, id="X1", location="node-b:8060"), " uuid")
            assert forwarded.root_field == root
            assert forwarded.query == f'{{ {root}(id: "X1") {{ uuid}} }}'

    def test_payload(self):
        forwarded = ForwardedQuery(host="node-b:8060", query="{ key(id: \"K1\") { uuid } }", root_field="key")
        assert forwarded.payload() == {"query": forwarded.query}


class TestPeerClient:
    @pytest.mark.asyncio
    async def test_query_headers_and_body(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json={"data": {"key": {"uuid": "K1"}}})

        client = _peer(handler, api_key="secret")
        body = await client.query("node-b:8060", '{ key(id: "K1") { uuid } }', variables={"a": 1}, operation_name="Op")

        request = captured["request"]
        assert body == {"data": {"key": {"uuid": "K1"}}}
        assert str(request.url) == "http://node-b:8060/graphql"
        assert request.method == "POST"
        assert request.headers["X-API-KEY"] == "secret"
        assert request.headers["Accept"] == "application/json"
        assert json.loads(request.content) == {
            "query": '{ key(id: "K1") { uuid } }',
            "variables": {"a": 1},
            "operationName": "Op",
        }

    @pytest.mark.asyncio
    async def test_no_api_key_header_when_unset(self):
        captured = {}

        def handler(request):
            captured["headers"] = request.headers
            return httpx.Response(200, json={"data": None})

        await _peer(handler).query("node-b:8060", "{ __typename }")
        assert "X-API-KEY" not in captured["headers"]

    @pytest.mark.asyncio
    async def test_batch_endpoint(self):
        def handler(request):
            assert request.url.path == "/graphql/batch"
            return httpx.Response(200, json=[{"data": {}}, {"data": {}}])

        result = await _peer(handler, scheme="https").batch("node-b", [{"query": "{ a }"}, {"query": "{ b }"}])
        assert len(result) == 2

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = _peer(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(PeerError) as exc_info:
            await client.query("node-b:8060", "{ __typename }")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PeerError, match="failed"):
            await _peer(handler).query("node-b:8060", "{ __typename }")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = _peer(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(PeerError, match="invalid JSON"):
            await client.query("node-b:8060", "{ __typename }")

    @pytest.mark.asyncio
    async def test_forward_rejects_non_object_body(self):
        client = _peer(lambda request: httpx.Response(200, json=[{"data": None}]))
        forwarded = ForwardedQuery(host="node-b:8060", query="{ a }", root_field="a")

        with pytest.raises(PeerError, match="instead of a GraphQL response"):
            await client.forward(forwarded)

    @pytest.mark.asyncio
    async def test_forward_requires_host(self):
        with pytest.raises(PeerError, match="no target host"):
            await PeerClient().forward(ForwardedQuery(host="", query="{ a }", root_field="a"))
