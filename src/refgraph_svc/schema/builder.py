"""GraphQL schema and resolver graph.

The schema is built in two phases: type shells are declared first and
their fields are attached through thunks, so ``Key.parent`` and the
``key`` field of the SchemaObject interface can refer to ``Key`` itself.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from graphql import (
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLField,
    GraphQLFloat,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLResolveInfo,
    GraphQLSchema,
    GraphQLString,
    assert_valid_schema,
)

from ..connectors.base import DatabaseConnector
from ..entities.types import (
    Action, Entity, Identifiable, Key, ObjectSubject, Reference, SchemaObject, Thing,
)
from ..errors import SchemaInconsistencyError
from ..federation.peer import PeerClient
from .crossref import CrossRefResolver


logger = logging.getLogger(__name__)

Resolver = Callable[..., Any]


class SchemaBuilder:
    """
    Builds the query schema over a database connector.

    Field resolvers are parameterized over the capability they read
    (Identifiable, SchemaObject, Key, ...) rather than the concrete type,
    so the SchemaObject fields share one resolver set for Thing and Action.
    """

    def __init__(
        self,
        connector: DatabaseConnector,
        host_address: str,
        strict_sources: bool = True,
        peer: PeerClient | None = None,
    ):
        self.connector = connector
        self.strict_sources = strict_sources
        self.crossref = CrossRefResolver(connector, host_address, peer=peer)

    # ------------------------------------------------------------------
    # Resolver factories
    # ------------------------------------------------------------------

    def _mistyped(self, source: Any, info: GraphQLResolveInfo) -> None:
        if self.strict_sources:
            raise SchemaInconsistencyError(
                f"{info.parent_type.name}.{info.field_name} cannot be read "
                f"from a {type(source).__name__} source"
            )
        return None

    def read(self, capability: type | tuple[type, ...], attr: str, convert: Callable[[Any], Any] | None = None) -> Resolver:
        """Resolver returning ``source.<attr>`` for sources with ``capability``."""
        def resolve(source: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
            if not isinstance(source, capability):
                return self._mistyped(source, info)
            value = getattr(source, attr)
            if value is None or convert is None:
                return value
            return convert(value)
        return resolve

    def follow(self, capability: type | tuple[type, ...], attr: str) -> Resolver:
        """Resolver that resolves the reference held in ``source.<attr>``."""
        async def resolve(source: Any, info: GraphQLResolveInfo, **args: Any) -> Entity | None:
            if not isinstance(source, capability):
                return self._mistyped(source, info)
            ref: Reference | None = getattr(source, attr)
            if ref is None:
                return None
            return await self.crossref.resolve(ref, info.field_nodes, info.fragments)
        return resolve

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def _uuid_field(self, description: str = "The id of the object.") -> GraphQLField:
        return GraphQLField(
            GraphQLNonNull(GraphQLString),
            description=description,
            resolve=self.read(Identifiable, "uuid"),
        )

    def _schema_object_fields(self) -> dict[str, GraphQLField]:
        return {
            "atContext": GraphQLField(
                GraphQLNonNull(GraphQLString),
                description="The context on which the object is in.",
                resolve=self.read(SchemaObject, "at_context"),
            ),
            "atClass": GraphQLField(
                GraphQLNonNull(GraphQLString),
                description="The class of the object.",
                resolve=self.read(SchemaObject, "at_class"),
            ),
            "creationTimeUnix": GraphQLField(
                GraphQLNonNull(GraphQLFloat),
                description="The creation time of the object.",
                resolve=self.read(SchemaObject, "creation_time_unix", float),
            ),
            "lastUpdateTimeUnix": GraphQLField(
                GraphQLFloat,
                description="The last update time of the object.",
                resolve=self.read(SchemaObject, "last_update_time_unix", float),
            ),
            "uuid": self._uuid_field(),
        }

    def build(self) -> GraphQLSchema:
        """Build and validate the schema."""
        # Phase one: type shells. Fields are thunks evaluated after every
        # type below exists.
        object_interface = GraphQLInterfaceType(
            "Identifiable",
            lambda: {
                "uuid": GraphQLField(GraphQLNonNull(GraphQLString), description="The id of the object."),
            },
            description="An object in the database.",
        )

        schema_interface = GraphQLInterfaceType(
            "SchemaObject",
            lambda: {
                **{
                    name: GraphQLField(f.type, description=f.description)
                    for name, f in self._schema_object_fields().items()
                },
                "key": GraphQLField(key_type, description="The key which is the owner of the object."),
            },
            interfaces=[object_interface],
            description="An object that has to commit to the Thing or Action schema.",
        )

        key_type = GraphQLObjectType(
            "Key",
            lambda: {
                "uuid": self._uuid_field("The id of the key."),
                "token": GraphQLField(
                    GraphQLNonNull(GraphQLString),
                    description="The token of the key.",
                    resolve=self.read(Key, "token"),
                ),
                "email": GraphQLField(
                    GraphQLNonNull(GraphQLString),
                    description="The email of the key.",
                    resolve=self.read(Key, "email"),
                ),
                "ipOrigin": GraphQLField(
                    GraphQLList(GraphQLString),
                    description="The allowed ip-origins of the key.",
                    resolve=self.read(Key, "ip_origin", list),
                ),
                "keyExpiresUnix": GraphQLField(
                    GraphQLNonNull(GraphQLFloat),
                    description="The unix timestamp of when the key expires.",
                    resolve=self.read(Key, "key_expires_unix", float),
                ),
                "read": GraphQLField(
                    GraphQLNonNull(GraphQLBoolean),
                    description="Whether the key has read-rights.",
                    resolve=self.read(Key, "read"),
                ),
                "write": GraphQLField(
                    GraphQLNonNull(GraphQLBoolean),
                    description="Whether the key has write-rights.",
                    resolve=self.read(Key, "write"),
                ),
                "execute": GraphQLField(
                    GraphQLNonNull(GraphQLBoolean),
                    description="Whether the key has execute-rights.",
                    resolve=self.read(Key, "execute"),
                ),
                "delete": GraphQLField(
                    GraphQLNonNull(GraphQLBoolean),
                    description="Whether the key has delete-rights.",
                    resolve=self.read(Key, "delete"),
                ),
                # Self-reference, only valid because fields are a thunk
                "parent": GraphQLField(
                    key_type,
                    description="The parent of the key.",
                    resolve=self.follow(Key, "parent"),
                ),
            },
            interfaces=[object_interface],
            description="A key from the database.",
        )

        thing_type = GraphQLObjectType(
            "Thing",
            lambda: {
                **self._schema_object_fields(),
                "key": GraphQLField(
                    key_type,
                    description="The key which is the owner of the object.",
                    resolve=self.follow(Thing, "key"),
                ),
            },
            interfaces=[schema_interface, object_interface],
            description="A thing from the database, based on the schema.",
        )

        object_subject_type = GraphQLObjectType(
            "ObjectSubject",
            lambda: {
                "object": GraphQLField(
                    thing_type,
                    description="The thing which is the object of this action.",
                    resolve=self.follow(ObjectSubject, "object"),
                ),
                "subject": GraphQLField(
                    thing_type,
                    description="The thing which is the subject of this action.",
                    resolve=self.follow(ObjectSubject, "subject"),
                ),
            },
            description="An object / subject, part of action. These are both of type Thing.",
        )

        action_type = GraphQLObjectType(
            "Action",
            lambda: {
                **self._schema_object_fields(),
                "things": GraphQLField(
                    object_subject_type,
                    description="The things this action relates.",
                    resolve=self.read(Action, "things"),
                ),
                "key": GraphQLField(
                    key_type,
                    description="The key which is the owner of the object.",
                    resolve=self.follow(Action, "key"),
                ),
            },
            interfaces=[schema_interface, object_interface],
            description="An action from the database, based on the schema.",
        )

        # Phase two: the query root seeds resolution
        query_type = GraphQLObjectType(
            "Query",
            lambda: {
                "thing": GraphQLField(
                    thing_type,
                    args={"id": GraphQLArgument(GraphQLNonNull(GraphQLString), description="UUID of the thing")},
                    resolve=self._fetch_root(self.connector.get_thing, "thing"),
                ),
                "action": GraphQLField(
                    action_type,
                    args={"id": GraphQLArgument(GraphQLNonNull(GraphQLString), description="UUID of the action")},
                    resolve=self._fetch_root(self.connector.get_action, "action"),
                ),
                "key": GraphQLField(
                    key_type,
                    args={"id": GraphQLArgument(GraphQLNonNull(GraphQLString), description="UUID of the key")},
                    resolve=self._fetch_root(self.connector.get_key, "key"),
                ),
            },
        )

        schema = GraphQLSchema(query=query_type)
        assert_valid_schema(schema)

        logger.info("GraphQL schema initialised")
        return schema

    def _fetch_root(self, fetch: Callable[[str], Any], field_name: str) -> Resolver:
        async def resolve(root: Any, info: GraphQLResolveInfo, **args: Any) -> Entity:
            uuid = args["id"]
            logger.debug(f"Query root {field_name}(id: {uuid!r})")
            return await fetch(uuid)
        return resolve


def build_schema(
    connector: DatabaseConnector,
    host_address: str,
    strict_sources: bool = True,
    peer: PeerClient | None = None,
) -> GraphQLSchema:
    """Convenience function to build the schema."""
    return SchemaBuilder(connector, host_address, strict_sources=strict_sources, peer=peer).build()
