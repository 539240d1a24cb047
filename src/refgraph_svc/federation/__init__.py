"""Federation - policy gate and peer forwarding."""

from .gate import DENIAL_REASON, Allowed, Denied, GateDecision, evaluate
from .peer import ForwardedQuery, PeerClient, PeerError, build_forwarded_query

__all__ = [
    "DENIAL_REASON",
    "Allowed",
    "Denied",
    "GateDecision",
    "evaluate",
    "ForwardedQuery",
    "PeerClient",
    "PeerError",
    "build_forwarded_query",
]
