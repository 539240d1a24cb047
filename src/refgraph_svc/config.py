"""Configuration for the refgraph service."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8060
    reload: bool = False


@dataclass
class NodeConfig:
    """Identity of this node within a multi-node deployment."""
    # Externally reachable host[:port]; references whose origin equals this
    # address are local and may be resolved.
    host_address: str = "localhost:8060"


@dataclass
class ConnectorConfig:
    """Database connector configuration."""
    type: str = "memory"  # memory

    # Optional YAML/JSON file with entities to preload
    seed_file: str | None = None


@dataclass
class GraphQLConfig:
    """Query endpoint configuration."""
    batch_enabled: bool = True
    max_batch_size: int = 50

    # Deadline for a single query (0 = no deadline)
    query_timeout_seconds: float = 0.0

    # Raise SchemaInconsistencyError when a resolver receives a source of
    # the wrong type; when False the field resolves to null instead.
    strict_sources: bool = True


@dataclass
class PeerConfig:
    """Settings for requests forwarded to peer nodes."""
    api_key: str | None = None
    timeout_seconds: float = 30.0
    scheme: str = "http"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"


@dataclass
class Config:
    """Main configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    node: NodeConfig = field(default_factory=NodeConfig)
    connector: ConnectorConfig = field(default_factory=ConnectorConfig)
    graphql: GraphQLConfig = field(default_factory=GraphQLConfig)
    peer: PeerConfig = field(default_factory=PeerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Create config from dictionary."""
        return cls(
            server=ServerConfig(**data.get("server", {})),
            node=NodeConfig(**data.get("node", {})),
            connector=ConnectorConfig(**data.get("connector", {})),
            graphql=GraphQLConfig(**data.get("graphql", {})),
            peer=PeerConfig(**data.get("peer", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> Config:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str) -> Config:
        """Load config from a YAML or JSON file, chosen by extension."""
        if path.endswith((".yaml", ".yml")):
            return cls.from_yaml(path)
        return cls.from_json(path)
