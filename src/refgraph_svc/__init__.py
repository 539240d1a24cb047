"""
RefGraph Service - GraphQL access to Things, Actions and Keys

A read-only graph query layer providing:
- Typed schema over three entity kinds sharing two capability contracts
- Cross-reference resolution through a pluggable database connector
- A federation gate that only resolves references owned by this node
- Sub-query reprojection for forwarding references to peer nodes
"""

__version__ = "0.1.0"
