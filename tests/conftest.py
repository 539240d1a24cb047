"""Shared test fixtures for the refgraph service.

The fixture node is LOCAL; every reference located at REMOTE belongs to
another node and must be denied by the federation gate.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from refgraph_svc.config import Config, NodeConfig
from refgraph_svc.connectors.memory import InMemoryConnector
from refgraph_svc.entities.types import (
    Action, Key, ObjectSubject, RefKind, Reference, Thing,
)
from refgraph_svc.schema.builder import build_schema
from refgraph_svc.service import GraphService


LOCAL = "localhost:8060"
REMOTE = "node-b.example.com:8060"


def ref(kind: RefKind | str, uuid: str, location: str | None = LOCAL) -> Reference:
    return Reference(kind=kind, id=uuid, location=location)


def _schema_fields(at_class: str, last_update: float | None = None) -> dict:
    return {
        "at_context": "http://schema.org",
        "at_class": at_class,
        "creation_time_unix": 1514764800.0,
        "last_update_time_unix": last_update,
    }


def populate(connector: InMemoryConnector) -> InMemoryConnector:
    """Fill a connector with the standard fixture graph."""
    connector.add_all([
        Key(uuid="K0", token="root-token", email="root@example.com",
            read=True, write=True, execute=True, delete=True),
        Key(uuid="K1", token="owner-token", email="owner@example.com",
            ip_origin=("127.0.0.1", "10.0.0.1"), key_expires_unix=1893456000,
            read=True, write=True, parent=ref(RefKind.KEY, "K0")),
        Key(uuid="K2", token="guest-token", email="guest@example.com",
            read=True, parent=ref(RefKind.KEY, "K9", REMOTE)),

        Thing(uuid="T1", key=ref(RefKind.KEY, "K1"), **_schema_fields("Person")),
        Thing(uuid="T2", key=ref(RefKind.KEY, "K1"), **_schema_fields("Person", 1517443200.0)),
        Thing(uuid="T3", key=ref(RefKind.KEY, "K1", REMOTE), **_schema_fields("Place")),
        Thing(uuid="T4", key=ref(RefKind.KEY, "K404"), **_schema_fields("Place")),

        Action(
            uuid="A1",
            key=ref(RefKind.KEY, "K1"),
            things=ObjectSubject(object=ref(RefKind.THING, "T1"), subject=ref(RefKind.THING, "T2")),
            **_schema_fields("FollowAction"),
        ),
        Action(
            uuid="A2",
            key=ref(RefKind.KEY, "K1", REMOTE),
            things=ObjectSubject(object=ref(RefKind.THING, "T1"), subject=ref(RefKind.THING, "T7", REMOTE)),
            **_schema_fields("LikeAction"),
        ),
        Action(
            uuid="A3",
            key=ref(RefKind.KEY, "K1"),
            things=ObjectSubject(object=ref(RefKind.THING, "T404"), subject=ref("Gadget", "G1")),
            **_schema_fields("BrokenAction"),
        ),
    ])
    return connector


@dataclass
class RecordingConnector(InMemoryConnector):
    """In-memory connector that records every fetch."""
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def get_thing(self, uuid: str) -> Thing:
        self.calls.append(("thing", uuid))
        return await super().get_thing(uuid)

    async def get_action(self, uuid: str) -> Action:
        self.calls.append(("action", uuid))
        return await super().get_action(uuid)

    async def get_key(self, uuid: str) -> Key:
        self.calls.append(("key", uuid))
        return await super().get_key(uuid)


@dataclass
class SlowConnector(InMemoryConnector):
    """In-memory connector whose thing fetches take ``delay`` seconds."""
    delay: float = 1.0
    cancelled: bool = False

    async def get_thing(self, uuid: str) -> Thing:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return await super().get_thing(uuid)


# =============================================================================
# Connector Fixtures
# =============================================================================

@pytest.fixture
def connector() -> RecordingConnector:
    """Recording connector holding the fixture graph."""
    return populate(RecordingConnector())


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def config() -> Config:
    """Configuration for the LOCAL node."""
    return Config(node=NodeConfig(host_address=LOCAL))


@pytest.fixture
def schema(connector, config):
    return build_schema(connector, config.node.host_address)


@pytest.fixture
def service(schema, config, connector) -> GraphService:
    return GraphService(schema=schema, config=config, connector=connector)


# =============================================================================
# Test Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "federation: cross-node reference behavior")
    config.addinivalue_line("markers", "scenario: end-to-end query scenarios")
