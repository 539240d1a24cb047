"""Federation policy gate.

Decides whether a reference may be resolved on this node. Only references
whose declared origin is this node's own address are allowed; everything
else is denied until a federation capability exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


DENIAL_REASON = "remote resolution requires an additional authorization not present on this node"


@dataclass(frozen=True, slots=True)
class Allowed:
    """The reference is local and may be resolved."""

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Denied:
    """The reference points at another node and must not be resolved."""
    reason: str = DENIAL_REASON

    def __bool__(self) -> bool:
        return False


GateDecision = Union[Allowed, Denied]


def evaluate(origin: object, own_address: object) -> GateDecision:
    """
    Evaluate the gate for a reference origin.

    Never raises. Any origin that is not a string equal to this node's
    address (including None) is denied.
    """
    if isinstance(origin, str) and isinstance(own_address, str) and origin == own_address:
        return Allowed()
    return Denied()
