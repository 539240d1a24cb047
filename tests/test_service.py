"""Tests for the query execution service."""

import asyncio

import pytest

from conftest import LOCAL, SlowConnector, populate
from refgraph_svc.config import Config, ConnectorConfig, GraphQLConfig, NodeConfig
from refgraph_svc.errors import QueryTimeoutError
from refgraph_svc.schema.builder import build_schema
from refgraph_svc.service import GraphService, QueryRequest, create_service


class TestExecute:
    @pytest.mark.asyncio
    async def test_execute(self, service):
        result = await service.execute('{ thing(id: "T1") { uuid } }')

        assert result.data == {"thing": {"uuid": "T1"}}
        assert service.stats == {"queries": 1, "queries_with_errors": 0}

    @pytest.mark.asyncio
    async def test_variables_and_operation_name(self, service):
        result = await service.execute(
            "query A($id: String!) { action(id: $id) { uuid } } query B { key(id: \"K0\") { uuid } }",
            variables={"id": "A1"},
            operation_name="A",
        )
        assert result.data == {"action": {"uuid": "A1"}}

    @pytest.mark.asyncio
    async def test_field_errors_are_counted(self, service):
        result = await service.execute('{ thing(id: "nope") { uuid } }')

        assert result.data == {"thing": None}
        assert service.stats["queries_with_errors"] == 1

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self, service):
        results = await service.execute_batch([
            QueryRequest(query='{ key(id: "K0") { uuid } }'),
            QueryRequest(query='{ thing(id: "nope") { uuid } }'),
            QueryRequest.from_dict({"query": 'query Q($id: String!) { thing(id: $id) { uuid } }',
                                    "variables": {"id": "T2"}, "operationName": "Q"}),
        ])

        assert [r.data for r in results] == [
            {"key": {"uuid": "K0"}},
            {"thing": None},
            {"thing": {"uuid": "T2"}},
        ]
        assert results[0].errors is None
        assert results[1].errors


class TestDeadline:
    @pytest.mark.asyncio
    async def test_deadline_cancels_resolution(self):
        connector = populate(SlowConnector(delay=5.0))
        config = Config(
            node=NodeConfig(host_address=LOCAL),
            graphql=GraphQLConfig(query_timeout_seconds=0.05),
        )
        service = GraphService(schema=build_schema(connector, LOCAL), config=config, connector=connector)

        with pytest.raises(QueryTimeoutError):
            await service.execute('{ thing(id: "T1") { uuid } }')

        await asyncio.sleep(0)
        assert connector.cancelled

    @pytest.mark.asyncio
    async def test_no_deadline_by_default(self):
        connector = populate(SlowConnector(delay=0.01))
        config = Config(node=NodeConfig(host_address=LOCAL))
        service = GraphService(schema=build_schema(connector, LOCAL), config=config, connector=connector)

        result = await service.execute('{ thing(id: "T1") { uuid } }')
        assert result.data == {"thing": {"uuid": "T1"}}


class TestCreateService:
    @pytest.mark.asyncio
    async def test_from_seed_file(self, tmp_path):
        seed = tmp_path / "data.yaml"
        seed.write_text(
            "keys:\n"
            "  K1: {token: t, email: e@example.com}\n"
            "things:\n"
            "  T1: {at_context: c, at_class: Person, creation_time_unix: 1,"
            " key: {kind: Key, id: K1, location: 'node-a:8060'}}\n"
        )
        config = Config(
            node=NodeConfig(host_address="node-a:8060"),
            connector=ConnectorConfig(type="memory", seed_file=str(seed)),
        )

        service = create_service(config)
        result = await service.execute('{ thing(id: "T1") { key { email } } }')

        assert result.errors is None
        assert result.data == {"thing": {"key": {"email": "e@example.com"}}}

    @pytest.mark.asyncio
    async def test_with_explicit_connector(self, connector, config):
        service = create_service(config, connector=connector)
        result = await service.execute('{ key(id: "K1") { parent { uuid } } }')
        assert result.data == {"key": {"parent": {"uuid": "K0"}}}
