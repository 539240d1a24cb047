"""Entity types - capability contracts, references and the three entity kinds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class EntityParseError(ValueError):
    """Raised when a stored record cannot populate every mandatory field."""
    pass


class RefKind(str, Enum):
    """Kinds of entity a reference can point at."""
    THING = "Thing"
    ACTION = "Action"
    KEY = "Key"


@dataclass(frozen=True, slots=True)
class Reference:
    """
    Pointer to an entity that still has to be resolved.

    A reference is never returned as a field value. Resolution always
    replaces it with a freshly fetched entity or an error.
    """
    # RefKind for known kinds; the raw string is kept for anything else
    kind: RefKind | str

    # Identifier of the target entity
    id: str

    # host[:port] of the node that owns the target entity
    location: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reference:
        """
        Build a reference from a stored record.

        Accepts both the wire shape (``type``, ``$cref``, ``locationUrl``)
        and the short shape (``kind``, ``id``, ``location``).
        """
        if not isinstance(data, dict):
            raise EntityParseError(f"Reference must be a mapping, got {type(data).__name__}")

        raw_kind = data.get("kind", data.get("type"))
        ref_id = data.get("id", data.get("$cref"))
        if raw_kind is None or ref_id is None:
            raise EntityParseError(f"Reference requires a kind and an id: {data}")

        return cls(
            kind=str(raw_kind),
            id=str(ref_id),
            location=data.get("location", data.get("locationUrl")),
        )

    def __post_init__(self) -> None:
        if not isinstance(self.kind, RefKind):
            try:
                object.__setattr__(self, "kind", RefKind(self.kind))
            except ValueError:
                pass

    @property
    def is_known_kind(self) -> bool:
        return isinstance(self.kind, RefKind)

    @property
    def kind_name(self) -> str:
        return self.kind.value if isinstance(self.kind, RefKind) else str(self.kind)


@dataclass(frozen=True, slots=True, kw_only=True)
class Identifiable:
    """Capability shared by every entity: a unique identifier."""
    uuid: str


@dataclass(frozen=True, slots=True, kw_only=True)
class SchemaObject(Identifiable):
    """Capability shared by Things and Actions: schema metadata."""
    at_context: str
    at_class: str
    creation_time_unix: float

    # Absent until the first update
    last_update_time_unix: float | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Key(Identifiable):
    """An API key. Keys form an ownership hierarchy through ``parent``."""
    token: str
    email: str
    ip_origin: tuple[str, ...] = ()
    key_expires_unix: float = -1

    # Permission flags
    read: bool = False
    write: bool = False
    execute: bool = False
    delete: bool = False

    # Weak back-reference to the owning key, resolved lazily
    parent: Reference | None = None

    @classmethod
    def from_dict(cls, uuid: str, data: dict[str, Any]) -> Key:
        _require(data, "Key", uuid, "token", "email")
        parent = data.get("parent")
        return cls(
            uuid=uuid,
            token=data["token"],
            email=data["email"],
            ip_origin=tuple(data.get("ip_origin", data.get("ipOrigin", ())) or ()),
            key_expires_unix=float(data.get("key_expires_unix", data.get("keyExpiresUnix", -1))),
            read=bool(data.get("read", False)),
            write=bool(data.get("write", False)),
            execute=bool(data.get("execute", False)),
            delete=bool(data.get("delete", False)),
            parent=Reference.from_dict(parent) if parent else None,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class Thing(SchemaObject):
    """A thing described by the schema, owned by exactly one key."""
    key: Reference

    @classmethod
    def from_dict(cls, uuid: str, data: dict[str, Any]) -> Thing:
        _require(data, "Thing", uuid, "key")
        return cls(
            uuid=uuid,
            key=Reference.from_dict(data["key"]),
            **_schema_fields("Thing", uuid, data),
        )


@dataclass(frozen=True, slots=True)
class ObjectSubject:
    """The two things an action relates: its object and its subject."""
    object: Reference
    subject: Reference

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ObjectSubject:
        if not isinstance(data, dict) or "object" not in data or "subject" not in data:
            raise EntityParseError("Action things require both 'object' and 'subject'")
        return cls(
            object=Reference.from_dict(data["object"]),
            subject=Reference.from_dict(data["subject"]),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class Action(SchemaObject):
    """An action described by the schema, relating two things."""
    key: Reference
    things: ObjectSubject

    @classmethod
    def from_dict(cls, uuid: str, data: dict[str, Any]) -> Action:
        _require(data, "Action", uuid, "key", "things")
        return cls(
            uuid=uuid,
            key=Reference.from_dict(data["key"]),
            things=ObjectSubject.from_dict(data["things"]),
            **_schema_fields("Action", uuid, data),
        )


Entity = Union[Thing, Action, Key]

_KIND_BY_TYPE: dict[type, RefKind] = {
    Thing: RefKind.THING,
    Action: RefKind.ACTION,
    Key: RefKind.KEY,
}


def entity_kind(entity: Entity) -> RefKind:
    """Return the kind tag for an entity instance."""
    try:
        return _KIND_BY_TYPE[type(entity)]
    except KeyError:
        raise TypeError(f"Not an entity: {type(entity).__name__}") from None


def _require(data: dict[str, Any], kind: str, uuid: str, *names: str) -> None:
    if not isinstance(data, dict):
        raise EntityParseError(f"{kind} {uuid}: record must be a mapping")
    missing = [name for name in names if data.get(name) is None]
    if missing:
        raise EntityParseError(f"{kind} {uuid}: missing mandatory fields {missing}")


def _schema_fields(kind: str, uuid: str, data: dict[str, Any]) -> dict[str, Any]:
    """Read the SchemaObject fields, accepting snake_case or wire names."""
    values = {
        "at_context": data.get("at_context", data.get("@context")),
        "at_class": data.get("at_class", data.get("@class")),
        "creation_time_unix": data.get("creation_time_unix", data.get("creationTimeUnix")),
    }
    missing = [name for name, value in values.items() if value is None]
    if missing:
        raise EntityParseError(f"{kind} {uuid}: missing mandatory fields {missing}")

    last_update = data.get("last_update_time_unix", data.get("lastUpdateTimeUnix"))
    values["creation_time_unix"] = float(values["creation_time_unix"])
    values["last_update_time_unix"] = float(last_update) if last_update is not None else None
    return values
